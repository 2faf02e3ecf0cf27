"""Sequential conversion of discovered clip bundles.

Each bundle is processed on its own: name lookup, output planning, remux,
file times, optional cleanup. Any failure is recorded on that bundle's
result and the run moves on to the next one.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from .cleanup import CleanupFailed, apply_cleanup, plan_cleanup
from .library import AppNameIndex
from .naming import plan_conversion
from .remux import ConversionFailed, remux_session, set_capture_mtime
from .scanner import ClipBundle


# ── Result vocabulary ──────────────────────────────────────────────

STATUS_OK = "ok"
STATUS_FAILED = "failed"
STATUS_PLANNED = "planned"

CONVERSION_FAILED = "ConversionFailed"
CLEANUP_FAILED = "CleanupFailed"


@dataclass
class BundleResult:
    bundle: ClipBundle
    name: str
    output: Path
    status: str = STATUS_OK
    error_kind: str | None = None
    message: str = ""
    name_fallback: bool = False
    removed: list[Path] = field(default_factory=list)


@dataclass
class RunSummary:
    results: list[BundleResult] = field(default_factory=list)

    @property
    def failed(self) -> list[BundleResult]:
        return [r for r in self.results if r.status == STATUS_FAILED]

    @property
    def converted(self) -> list[BundleResult]:
        # A cleanup failure still leaves a converted mp4 behind.
        return [
            r for r in self.results
            if r.status == STATUS_OK or r.error_kind == CLEANUP_FAILED
        ]


@dataclass
class RunState:
    """What earlier bundles of the same run have claimed.

    written: output files produced (or planned) so far. A later bundle
    mapping to one of them fails even with force, which only replaces
    files left over from earlier runs.
    planned_removals: folders a dry run has planned to delete, so later
    cleanup plans see the tree the way a real run would.
    """

    written: set[Path] = field(default_factory=set)
    planned_removals: set[Path] = field(default_factory=set)


# ── Per-bundle processing ──────────────────────────────────────────


def process_bundle(
    bundle: ClipBundle,
    index: AppNameIndex,
    output_dir: str | Path,
    delete_after: bool = False,
    force: bool = False,
    dry_run: bool = False,
    convert: Callable[..., None] = remux_session,
    run: RunState | None = None,
) -> BundleResult:
    """Convert one bundle and report how it went. Never raises for
    conversion, file-time, or cleanup failures."""
    name, fell_back = index.name_for(bundle.app_id)
    plan = plan_conversion(bundle, name, output_dir)
    result = BundleResult(
        bundle=bundle,
        name=name,
        output=plan.output_file_path,
        name_fallback=fell_back,
    )

    if run is None:
        run = RunState()

    if plan.output_file_path in run.written:
        return _fail(
            result, CONVERSION_FAILED,
            f"{plan.output_file_path} already written by an earlier clip in this run",
        )

    if dry_run:
        result.status = STATUS_PLANNED
        run.written.add(plan.output_file_path)
        if delete_after:
            result.removed = plan_cleanup(bundle, run.planned_removals).paths
            run.planned_removals.update(result.removed)
        return result

    if plan.output_file_path.exists() and not force:
        return _fail(
            result, CONVERSION_FAILED,
            f"{plan.output_file_path} exists, use --force to overwrite",
        )

    try:
        convert(plan.source_manifest, plan.output_file_path, overwrite=force)
    except ConversionFailed as e:
        return _fail(result, CONVERSION_FAILED, str(e))
    run.written.add(plan.output_file_path)

    try:
        set_capture_mtime(plan.output_file_path, plan.desired_mtime_utc)
    except OSError as e:
        # Clip folder is kept: the mp4 isn't what we promised yet.
        return _fail(result, CONVERSION_FAILED, f"Failed to set file times: {e}")

    if delete_after:
        try:
            result.removed = apply_cleanup(plan_cleanup(bundle))
        except CleanupFailed as e:
            result.removed = list(getattr(e, "removed", []))
            return _fail(result, CLEANUP_FAILED, str(e))

    return result


def _fail(result: BundleResult, kind: str, message: str) -> BundleResult:
    result.status = STATUS_FAILED
    result.error_kind = kind
    result.message = message
    return result


# ── Batch ──────────────────────────────────────────────────────────


def _describe(bundle: ClipBundle) -> str:
    start = bundle.capture_instant.strftime("%Y-%m-%d %H:%M:%S")
    return f"{bundle.directory_path.name}  (appid={bundle.app_id}, start={start} UTC)"


def _report(result: BundleResult) -> None:
    if result.name_fallback:
        print(f"  WARN   no game name for appid {result.bundle.app_id}, using the id")
    if result.status == STATUS_PLANNED:
        print(f"  PLAN   {result.output}")
        for path in result.removed:
            print(f"  PLAN   delete {path}")
        return
    if result.error_kind == CONVERSION_FAILED:
        print(f"  FAIL   {result.message}")
        return
    print(f"  OK     {result.output}")
    for path in result.removed:
        print(f"  DEL    {path}")
    if result.error_kind == CLEANUP_FAILED:
        print(f"  FAIL   {result.message}")


def convert_bundles(
    bundles: Iterable[ClipBundle],
    index: AppNameIndex,
    output_dir: str | Path,
    delete_after: bool = False,
    force: bool = False,
    dry_run: bool = False,
    convert: Callable[..., None] = remux_session,
) -> RunSummary:
    """Process bundles one at a time in the order given.

    Args:
        bundles: Clip bundles, usually straight from scan_clip_bundles().
        index: Game name lookup built once for the run.
        output_dir: Directory for the mp4 files (must exist).
        delete_after: Remove clip folders after a successful conversion.
        force: Overwrite existing output files.
        dry_run: Only plan; no ffmpeg, no file times, no deletion.
        convert: Conversion step, remux_session unless replaced.

    Returns:
        RunSummary with one result per bundle.
    """
    summary = RunSummary()
    run = RunState()
    for bundle in bundles:
        print(f"== {_describe(bundle)}")
        result = process_bundle(
            bundle, index, output_dir,
            delete_after=delete_after, force=force, dry_run=dry_run,
            convert=convert, run=run,
        )
        _report(result)
        summary.results.append(result)
    return summary


def print_summary(summary: RunSummary) -> None:
    """Print run totals and one line per failed bundle."""
    total = len(summary.results)
    failed = summary.failed
    planned = sum(1 for r in summary.results if r.status == STATUS_PLANNED)
    if planned:
        print(f"\nPlanned {planned} of {total} clip(s), nothing written.")
    else:
        print(f"\nConverted {len(summary.converted)} of {total} clip(s).")
    if failed:
        print(f"{len(failed)} failed:")
        for r in failed:
            print(f"  - {r.bundle.directory_path} [{r.error_kind}] {r.message}")
