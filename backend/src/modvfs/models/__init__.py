from modvfs.models.mod import ModPathRow, ModRow

__all__ = [
    "ModPathRow",
    "ModRow",
]
