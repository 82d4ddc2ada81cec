from __future__ import annotations


class SiteError(Exception):
    """Base class for every error raised while building a site."""


class ConfigError(SiteError):
    pass


class MissingOutputDir(ConfigError):
    pass


class ResourceNotFound(SiteError, KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Failed to find resource {self.name}"


class RendererNotFound(ConfigError):
    def __init__(self, name: str):
        super().__init__(f"Unknown renderer step '{name}'")
        self.name = name


class LayoutCycleError(ConfigError):
    def __init__(self, trail: list[str]):
        super().__init__("Layout cycle: " + " -> ".join(trail))
        self.trail = trail


class ChainDepthExceeded(ConfigError):
    pass


class WalkDepthExceeded(ConfigError):
    pass
