from dataclasses import dataclass

@dataclass(slots=True)
class ActiveSwitch:
    """Per-tile occupancy flag.

    active: True if the cell currently holds a candy; False if cleared/empty.
    Candy data lives in a separate Candy component and is only meaningful while active.
    """
    active: bool = True
