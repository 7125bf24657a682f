from orderqueue import create_app

app = create_app()

# Serve with: gunicorn wsgi:app
# Queue serialization is per process, so run a single worker process
# (gunicorn -w 1 --threads N) to keep queue writes ordered.
