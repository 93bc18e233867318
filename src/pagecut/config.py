from dataclasses import dataclass
from pathlib import Path

SUPPORTED_FORMATS = ("png", "jpeg", "webp")


@dataclass
class Settings:
    output_dir: Path = Path("output")
    zoom: float = 3.0
    hit_radius: float = 20.0
    background: str = "white"
    region_format: str = "png"
    page_format: str = "png"

    def validate(self) -> "Settings":
        """Raise ValueError if any setting is out of range."""
        if self.zoom <= 0:
            raise ValueError(f"zoom must be positive, got {self.zoom}")
        if self.hit_radius <= 0:
            raise ValueError(f"hit_radius must be positive, got {self.hit_radius}")
        for fmt in (self.region_format, self.page_format):
            if fmt.lower() not in SUPPORTED_FORMATS:
                raise ValueError(
                    f"Unsupported image format: {fmt}. Must be one of {', '.join(SUPPORTED_FORMATS)}"
                )
        return self
