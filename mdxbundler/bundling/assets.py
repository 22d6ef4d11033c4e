"""Where non-code imports end up: inlined, or written next to the bundle."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Optional

from ..engine.api import BuildOptions
from ..errors import ConfigurationError

PAIRING_MESSAGE = "When using `bundle_directory` or `bundle_path` the other must be set."
WRITE_MESSAGE = (
    "You must either specify `write=False` or `write=True` and `outdir='/path'` in your build options"
)


@dataclass(frozen=True)
class AssetEmissionConfig:
    bundle_directory: Optional[str] = None
    bundle_path: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.bundle_directory and self.bundle_path)

    def validate(self) -> None:
        if bool(self.bundle_directory) != bool(self.bundle_path):
            raise ConfigurationError(PAIRING_MESSAGE)

    def apply(self, options: BuildOptions) -> BuildOptions:
        """Point the build at ``bundle_directory`` when emission is configured."""
        if not self.enabled:
            return options
        return dataclasses.replace(
            options,
            write=True,
            outdir=os.path.abspath(str(self.bundle_directory)),
            public_path=str(self.bundle_path),
        )


def check_build_options(options: BuildOptions) -> None:
    """Reject option combinations the engine could not honour."""
    if options.write and not options.outdir:
        raise ConfigurationError(WRITE_MESSAGE)
    if options.outdir:
        return
    for extension, loader in sorted(options.loader.items()):
        if loader == "file":
            raise ConfigurationError(
                f'The "file" loader for "{extension}" files needs an output directory: '
                "set both `bundle_directory` and `bundle_path`."
            )


__all__ = ["AssetEmissionConfig", "PAIRING_MESSAGE", "WRITE_MESSAGE", "check_build_options"]
