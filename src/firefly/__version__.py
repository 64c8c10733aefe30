"""Firefly version information."""

__version__ = "0.2.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Version history:
# 0.1.0 - Initial release: 7-zone colors, 12 firmware effects, --ci zone select
# 0.2.0 - Typed errors, interface always released on failure, config file
#         (device IDs, default palette), --dry-run, --list-effects, -v logging
