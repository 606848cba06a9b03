"""Generate an example artifact to see what the packed C looks like."""

import sys
sys.path.insert(0, str(__import__("pathlib").Path(__file__).parent.parent))

import io
import os
import tempfile
from pathlib import Path

from cpack.reader import ArtifactReader
from cpack.scanner import scan_arguments
from cpack.writer import pack

here = Path(__file__).parent

start = os.getcwd()
with tempfile.TemporaryDirectory() as d:
    # Names in the directory are the paths as given, so pack from inside d
    os.chdir(d)
    Path("index.html").write_text("<h1>Hello from the binary</h1>\n")
    Path("config.json").write_text('{"port": 8000, "debug": false}\n')

    out = io.StringIO()
    entries = pack(scan_arguments(["index.html", "config.json"]), out)
    os.chdir(start)

output = here / "fs.c"
output.write_text(out.getvalue())
print(f"Generated {output} ({len(entries)} files)")

print()
print("=" * 60)
print("GENERATED fs.c:")
print("=" * 60)
print()
print(out.getvalue())

artifact = ArtifactReader.parse(out.getvalue())
for i in range(len(artifact)):
    name = artifact.unlist(i)
    hit = artifact.unpack(name)
    print(f"{name}: {hit.size} bytes, mtime={hit.mtime}, filtered={hit.filtered}")
