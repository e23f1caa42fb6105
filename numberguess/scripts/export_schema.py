#!/usr/bin/env python3
"""
Write JSON schemas for the wire messages and stored records.
Usage (from repo root):
  python -m numberguess.scripts.export_schema [out_dir]
Defaults to ./schema. Existing *.json files in out_dir are removed first.
"""
import json
import sys
from pathlib import Path

from numberguess.api.messages import (
    AdminOut,
    ExecuteMsg,
    GameStateOut,
    InstantiateMsg,
    QueryMsg,
    ResultAdmin,
    ResultGameInfo,
)

SCHEMAS = {
    "instantiate_msg": InstantiateMsg,
    "execute_msg": ExecuteMsg,
    "query_msg": QueryMsg,
    "admin": AdminOut,
    "game_state": GameStateOut,
    "result_admin": ResultAdmin,
    "result_game_info": ResultGameInfo,
}


def export_schemas(out_dir: Path) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    for stale in out_dir.glob("*.json"):
        stale.unlink()
    written = []
    for name, model in SCHEMAS.items():
        path = out_dir / f"{name}.json"
        path.write_text(json.dumps(model.model_json_schema(), indent=2) + "\n")
        written.append(path)
    return written


def main():
    out_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path.cwd() / "schema"
    for path in export_schemas(out_dir):
        print(f"Wrote {path}")


if __name__ == "__main__":
    main()
