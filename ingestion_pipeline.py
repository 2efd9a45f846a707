from __future__ import annotations

import argparse
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------
# Config + Context
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class PipelineConfig:
    project_dir: Path
    output_dir: Path
    project_name: Optional[str] = None

    # editor link data (JSON list) to write back into the GDS config first
    links_path: Optional[Path] = None

    @property
    def name(self) -> str:
        return self.project_name or self.project_dir.name

    @property
    def io_dir(self) -> Path:
        return self.project_dir / "Io"

    @property
    def meta_config_path(self) -> Path:
        return self.project_dir / "Plc" / "Meta" / f"{self.name}.meta.config"

    @property
    def esm_config_path(self) -> Path:
        return self.project_dir / "Plc" / "Esm" / f"{self.name}.esm.config"

    @property
    def acf_config_path(self) -> Path:
        return self.project_dir / "Plc" / "Plm" / f"{self.name}.acf.config"

    @property
    def gds_config_path(self) -> Path:
        return self.project_dir / "Plc" / "Gds" / f"{self.name}.gds.config"

    def artifact_path(self, artifact: str) -> Path:
        return self.output_dir / f"{artifact}.json"


@dataclass
class PipelineContext:
    cfg: PipelineConfig
    logger: logging.Logger
    artifacts: Dict[str, Any] = field(default_factory=dict)

    def set(self, key: str, value: Any) -> None:
        self.artifacts[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.artifacts.get(key, default)


# ---------------------------------------------------------------------
# Step base classes
# ---------------------------------------------------------------------
class StepError(RuntimeError):
    pass


class Step:
    name: str = "unnamed-step"

    def outputs(self, ctx: PipelineContext) -> List[Path]:
        """Files that should exist after step runs (used for skip logic)."""
        return []

    def should_skip(self, ctx: PipelineContext, force: bool) -> bool:
        if force:
            return False
        outs = self.outputs(ctx)
        if not outs:
            return False
        return all(p.exists() for p in outs)

    def run(self, ctx: PipelineContext) -> None:
        raise NotImplementedError


class Pipeline:
    def __init__(self, steps: List[Step], force: bool = False) -> None:
        self.steps = steps
        self.force = force

    def run(self, ctx: PipelineContext) -> None:
        for step in self.steps:
            t0 = time.time()
            if step.should_skip(ctx, self.force):
                ctx.logger.info("SKIP  %s (outputs exist)", step.name)
                continue

            ctx.logger.info("START %s", step.name)
            try:
                step.run(ctx)
            except Exception as exc:
                ctx.logger.exception("FAIL  %s", step.name)
                raise StepError(f"Step failed: {step.name}") from exc
            finally:
                dt = time.time() - t0
                ctx.logger.info("DONE  %s (%.2fs)", step.name, dt)


# ---------------------------------------------------------------------
# Utility: logger
# ---------------------------------------------------------------------
def build_logger(verbose: bool = False) -> logging.Logger:
    # readers log below "plcnext.*", so they share this handler
    logger = logging.getLogger("plcnext")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    fmt = logging.Formatter("[%(levelname)s] %(message)s")
    handler.setFormatter(fmt)

    # avoid duplicate handlers when running in notebooks
    if not logger.handlers:
        logger.addHandler(handler)
    logger.propagate = False
    return logger


# ---------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------
class ArtifactStep(Step):
    """Produces one JSON artifact (a list of objects with ``to_dict``) in the output dir."""

    artifact: str = ""

    def outputs(self, ctx: PipelineContext) -> List[Path]:
        return [ctx.cfg.artifact_path(self.artifact)]

    def extract(self, ctx: PipelineContext) -> List[Any]:
        raise NotImplementedError

    def run(self, ctx: PipelineContext) -> None:
        items = self.extract(ctx)
        ctx.set(self.artifact, items)

        out = ctx.cfg.artifact_path(self.artifact)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(
            json.dumps([i.to_dict() for i in items], indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        ctx.logger.info("%d %s written to %s", len(items), self.artifact, out)


class WriteConnectionsStep(Step):
    name = "write-connections"

    def run(self, ctx: PipelineContext) -> None:
        if ctx.cfg.links_path is None:
            ctx.logger.info("No link data configured.")
            return
        from gds_config import set_connections

        links = json.loads(Path(ctx.cfg.links_path).read_text(encoding="utf-8"))
        set_connections(links, ctx.cfg.gds_config_path)


class GlobalObjectsStep(ArtifactStep):
    name = "global-objects"
    artifact = "global_objects"

    def extract(self, ctx: PipelineContext) -> List[Any]:
        from global_objects import get_global_objects

        return get_global_objects()


class IoModulesStep(ArtifactStep):
    name = "io-modules"
    artifact = "io_modules"

    def extract(self, ctx: PipelineContext) -> List[Any]:
        from io_modules import find_tic_files, get_io_modules

        modules = []
        for tic in find_tic_files(ctx.cfg.io_dir):
            ctx.logger.debug("Reading %s", tic)
            modules.extend(get_io_modules(tic))
        return modules


class ProgramsStep(ArtifactStep):
    name = "programs"
    artifact = "programs"

    def extract(self, ctx: PipelineContext) -> List[Any]:
        from metadata import get_programs

        return get_programs(ctx.cfg.meta_config_path)


class TypesStep(ArtifactStep):
    name = "types"
    artifact = "types"

    def extract(self, ctx: PipelineContext) -> List[Any]:
        from metadata import get_types

        return get_types(ctx.cfg.meta_config_path)


class EsmConfigStep(ArtifactStep):
    name = "esm-config"
    artifact = "esm_config"

    def extract(self, ctx: PipelineContext) -> List[Any]:
        from esm_config import get_esm_config

        return get_esm_config(ctx.cfg.esm_config_path, ctx.cfg.acf_config_path)


class ProgramInstancesStep(ArtifactStep):
    name = "program-instances"
    artifact = "program_instances"

    def extract(self, ctx: PipelineContext) -> List[Any]:
        from esm_config import get_program_instances

        return get_program_instances(ctx.cfg.acf_config_path, ctx.cfg.esm_config_path)


class ConnectionsStep(ArtifactStep):
    name = "connections"
    artifact = "connections"

    def should_skip(self, ctx: PipelineContext, force: bool) -> bool:
        # freshly written links must be re-read
        if ctx.cfg.links_path is not None:
            return False
        return super().should_skip(ctx, force)

    def extract(self, ctx: PipelineContext) -> List[Any]:
        from gds_config import get_connections

        return get_connections(ctx.cfg.gds_config_path)


def default_steps() -> List[Step]:
    return [
        WriteConnectionsStep(),
        GlobalObjectsStep(),
        IoModulesStep(),
        ProgramsStep(),
        TypesStep(),
        EsmConfigStep(),
        ProgramInstancesStep(),
        ConnectionsStep(),
    ]


# ---------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------
def run_pipeline(cfg: PipelineConfig, force: bool = False, verbose: bool = False) -> PipelineContext:
    logger = build_logger(verbose=verbose)
    ctx = PipelineContext(cfg=cfg, logger=logger)
    Pipeline(steps=default_steps(), force=force).run(ctx)
    return ctx


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="PLCnext project -> editor JSON (nodes, ports, ESM tree, connections)")
    p.add_argument("--project-dir", type=str, required=True)
    p.add_argument("--output-dir", type=str, required=True)
    p.add_argument("--project-name", type=str, default=None, help="Defaults to the project directory name")
    p.add_argument("--links", type=str, default=None, help="Editor link JSON to write into the GDS config first")

    p.add_argument("--force", action="store_true", help="Run all steps even if outputs exist")
    p.add_argument("--verbose", action="store_true")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    cfg = PipelineConfig(
        project_dir=Path(args.project_dir),
        output_dir=Path(args.output_dir),
        project_name=args.project_name,
        links_path=Path(args.links) if args.links else None,
    )

    ctx = run_pipeline(cfg, force=args.force, verbose=args.verbose)

    ctx.logger.info("Pipeline finished.")
    ctx.logger.info("Artifacts in: %s", cfg.output_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
