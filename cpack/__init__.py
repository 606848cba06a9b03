"""
cpack - Pack arbitrary files into a C source file.

Embeds file contents as static byte tables plus a tiny lookup API,
so data files ship inside the compiled binary.
"""

__version__ = "0.1.0"

from cpack.errors import PackError, AcquisitionError, MalformedArgumentsError, ConfigError
from cpack.entry import InputSpec, PackedEntry
from cpack.scanner import scan_arguments
from cpack.writer import ArtifactWriter, pack
from cpack.reader import ArtifactReader, PackedArtifact
