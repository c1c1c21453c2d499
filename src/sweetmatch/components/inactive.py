from dataclasses import dataclass

@dataclass(slots=True)
class Inactive:
    """Tag component for tiles the shape mask marks unplayable.

    Such tiles are never generated, matched, cleared or moved by gravity.
    """
    pass
