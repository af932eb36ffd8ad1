"""chartbatch core package.

The package is organized into focused modules:

- **runner**: BatchRunner, the scan over ``{source}/music`` and end-of-run output
- **pipeline**: TrackPipeline, the per-track compile/export/commit sequence
- **asset_resolver** / **asset_exporter**: media lookup by stem and copy into the track folder
- **metadata_source**: ``Music.xml`` reader behind the TrackMetadataSource protocol
- **chart_compiler**: ChartCompiler protocol and the pass-through default
- **categories**: category schemes and routing
- **run_state** / **run_logs** / **run_summary**: run accumulation and reporting
- **config** / **validation**: YAML settings, overrides and schema validation

The main entry point is ``BatchRunner``; ``chartbatch.cli`` wraps it for the
command line.
"""

from .runner import BatchRunner
from .pipeline import TrackPipeline
from .version import __version__

__all__ = [
    "__version__",
    "BatchRunner",
    "TrackPipeline",
]
