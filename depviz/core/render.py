import asyncio
import logging
from typing import Tuple

from depviz.core.model import RenderArtifacts

DEFAULT_VISUALIZER = "dot"
DEFAULT_RASTER_COMMAND = "magick"


async def run_command(command: str) -> Tuple[int, str, str]:
    """Runs a shell command to completion and returns (exit code, stdout, stderr)."""
    logging.debug(f"Running: {command}")
    process = await asyncio.create_subprocess_shell(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    return (
        process.returncode,
        stdout.decode(errors="replace"),
        stderr.decode(errors="replace"),
    )


async def _run_stage(label: str, command: str) -> bool:
    try:
        code, _, stderr = await run_command(command)
    except OSError as e:
        logging.error(f"Could not start {label} conversion: {e}")
        return False

    if code != 0:
        logging.error(f"{label} conversion failed (exit {code}): {stderr.strip()}")
        return False
    if stderr.strip():
        logging.error(f"{label} conversion reported: {stderr.strip()}")
        return False

    return True


async def render(
    graph_text: str,
    output_base_name: str,
    visualizer_command: str = DEFAULT_VISUALIZER,
    *,
    raster_command: str = DEFAULT_RASTER_COMMAND,
) -> RenderArtifacts:
    """
    Writes the graph source and converts it to SVG, then the SVG to PNG.

    Each stage runs only if the previous one succeeded. Failures are
    logged, not raised; `produced` on the result lists what was written.
    Both commands go through the shell unmodified.
    """
    artifacts = RenderArtifacts.from_base(output_base_name)

    try:
        with open(artifacts.source, "w", encoding="utf-8") as f:
            f.write(graph_text)
    except OSError as e:
        logging.error(f"Could not write graph source {artifacts.source}: {e}")
        return artifacts

    artifacts.produced.append(artifacts.source)
    logging.info(f"DOT graph saved to: {artifacts.source}")

    svg_command = f"{visualizer_command} -Tsvg {artifacts.source} -o {artifacts.vector}"
    if not await _run_stage("SVG", svg_command):
        return artifacts

    artifacts.produced.append(artifacts.vector)
    logging.info(f"SVG image saved to: {artifacts.vector}")

    png_command = f"{raster_command} {artifacts.vector} {artifacts.raster}"
    if not await _run_stage("PNG", png_command):
        return artifacts

    artifacts.produced.append(artifacts.raster)
    logging.info(f"PNG image saved to: {artifacts.raster}")

    return artifacts
