import argparse
import json
from pathlib import Path
from typing import List, Optional

from errors import ConfigFileNotFoundError
from ingestion_pipeline import PipelineConfig, run_pipeline


def load_cfg(p: Path) -> PipelineConfig:
    d = json.loads(p.read_text(encoding="utf-8"))

    # relative paths in the config file are relative to the config file
    base = p.parent

    def _path(value: str) -> Path:
        return (base / value) if not Path(value).is_absolute() else Path(value)

    return PipelineConfig(
        project_dir=_path(d["project_dir"]),
        output_dir=_path(d["output_dir"]),
        project_name=d.get("project_name"),
        links_path=_path(d["links_path"]) if d.get("links_path") else None,
    )


def main(argv: Optional[List[str]] = None) -> int:
    script_dir = Path(__file__).parent.resolve()

    ap = argparse.ArgumentParser(description="Run the PLCnext ingestion from a JSON config file")
    ap.add_argument("config", nargs="?", default=str(script_dir / "config_ingestion.json"))
    ap.add_argument("--force", action="store_true")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    config_path = Path(args.config)
    if not config_path.exists():
        raise ConfigFileNotFoundError(f"Config file not found: {config_path}")

    cfg = load_cfg(config_path)
    run_pipeline(cfg, force=args.force, verbose=args.verbose)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
