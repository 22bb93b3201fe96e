import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from definitions import PATH_SCHEMA
from wardres.ingest.schema import export_json_schema as capture_schema
from wardres.parse.schema import export_json_schema as results_schema

out_dir = Path(PATH_SCHEMA)
out_dir.mkdir(parents=True, exist_ok=True)
for name, schema in (("spans", capture_schema()), ("results", results_schema())):
    out = out_dir / f"{name}.schema.json"
    out.write_text(json.dumps(schema, indent=2), encoding="utf-8")
    print(f"Wrote {out}")
