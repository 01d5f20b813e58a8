# Model package init
from .zone_instance import ZoneInstance  # noqa: F401 re-export

__all__ = ["ZoneInstance"]
