from .save_slot import SaveSlot
from .week_snapshot import WeekSnapshot

__all__ = [
    "SaveSlot",
    "WeekSnapshot",
]
