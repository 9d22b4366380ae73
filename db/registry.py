def import_models() -> None:
    """Import every model module so Base.metadata knows all tables."""
    from db.models import employee as _employee  # noqa: F401
    from db.models import reminder as _reminder  # noqa: F401
    from db.models import reminder_type as _reminder_type  # noqa: F401
    from db.models import lifecycle as _lifecycle  # noqa: F401
    from db.models import setting as _setting  # noqa: F401
    from db.models import user as _user  # noqa: F401
