"""Batch manifest models.

A manifest is a YAML document:

    max_concurrent: 2
    jobs:
      - input: clips/a.mp4
        output: out/a.mov
        preset: high
        settings: {crf: 20}
      - input: clips/b.mov
        output: out/b.mp4
        force_reencode: true

Relative paths are resolved against the manifest's directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mco.executor.cancellation import CancellationToken
from mco.jobs.models import JobDescriptor, ProgressCallback


class ManifestError(Exception):
    """Raised when a manifest cannot be read or is invalid."""


class JobEntry(BaseModel):
    """One job in a batch manifest."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    input: Path
    output: Path
    preset: str | None = None
    settings: dict[str, Any] = Field(default_factory=dict)
    force_reencode: bool = False

    @field_validator("input", "output")
    @classmethod
    def validate_path(cls, v: Path) -> Path:
        if not str(v).strip() or str(v) == ".":
            raise ValueError("path must not be empty")
        return v

    def to_job(
        self,
        base_dir: Path,
        token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> JobDescriptor:
        return JobDescriptor(
            input_path=base_dir / self.input.expanduser(),
            output_path=base_dir / self.output.expanduser(),
            requested_settings=self.settings,
            quality_preset=self.preset,
            cancellation_token=token or CancellationToken(),
            force_reencode=self.force_reencode,
            on_progress=on_progress,
        )


class BatchManifest(BaseModel):
    """A batch of conversion jobs."""

    model_config = ConfigDict(extra="forbid")

    jobs: list[JobEntry] = Field(min_length=1)
    max_concurrent: int | None = Field(default=None, ge=1)

    def to_jobs(self, base_dir: Path) -> list[JobDescriptor]:
        """Build one JobDescriptor per entry, each with its own token."""
        return [entry.to_job(base_dir) for entry in self.jobs]


def load_manifest(path: Path) -> BatchManifest:
    """Read and validate a manifest file.

    Raises:
        ManifestError: If the file is unreadable, not YAML, or invalid.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in manifest {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} must be a mapping with a 'jobs' list")

    try:
        return BatchManifest.model_validate(data)
    except ValidationError as e:
        raise ManifestError(f"Invalid manifest {path}:\n{e}") from e
