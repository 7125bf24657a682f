"""
Production configuration module.

Defaults applied to new orders when neither the request nor the saved
settings provide a value.
"""


class ProductionDefaults:
    """
    Default production parameters.

    Existing orders keep the values they were created with; changing these
    only affects orders created afterwards.
    """

    # Minutes to produce one unit
    PRODUCT_A_TIME: int = 30
    PRODUCT_B_TIME: int = 45

    # Minutes of production available per business day (8 hours)
    DAILY_CAPACITY_MINUTES: int = 480

    # Display names when no settings row exists
    PRODUCT_A_NAME: str = "Product A"
    PRODUCT_B_NAME: str = "Product B"

    @classmethod
    def resolve_times(cls, settings=None):
        """
        Return the (time_a, time_b) defaults, preferring saved settings.

        Args:
            settings: ProductionSettings instance or None

        Returns:
            tuple: (minutes per unit of A, minutes per unit of B)
        """
        time_a = getattr(settings, 'product_a_time', None) or cls.PRODUCT_A_TIME
        time_b = getattr(settings, 'product_b_time', None) or cls.PRODUCT_B_TIME
        return time_a, time_b

    @classmethod
    def resolve_names(cls, settings=None):
        """Return the (name_a, name_b) display names, preferring saved settings."""
        name_a = getattr(settings, 'product_a_name', None) or cls.PRODUCT_A_NAME
        name_b = getattr(settings, 'product_b_name', None) or cls.PRODUCT_B_NAME
        return name_a, name_b

    @classmethod
    def resolve_parameters(cls, settings=None, production_time_a=None,
                           production_time_b=None, daily_capacity=None):
        """
        Fill in missing production parameters.

        Explicit values win, then saved settings (times only), then these defaults.

        Returns:
            tuple: (production_time_a, production_time_b, daily_capacity)
        """
        default_a, default_b = cls.resolve_times(settings)
        return (
            production_time_a if production_time_a is not None else default_a,
            production_time_b if production_time_b is not None else default_b,
            daily_capacity if daily_capacity is not None else cls.DAILY_CAPACITY_MINUTES,
        )
