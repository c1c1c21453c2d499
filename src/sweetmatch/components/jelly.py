from dataclasses import dataclass

@dataclass(slots=True)
class Jelly:
    """Tag component for a jelly-covered coordinate.

    Jelly stays on its cell when candies fall and is removed the first time
    the candy on that cell is cleared.
    """
    pass
