"""
Pytest configuration for local imports and shared builders.
"""

# Standard Library
import os
import sys

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

# PIP3 modules
import pytest

# local repo modules
import postscript_tiler as pst
import postscript_tiler.config
import postscript_tiler.layout


#============================================
def build_document(
	bounding_box: str | None = "0 0 595 842",
	body: bytes = b"newpath 0 0 moveto 100 100 lineto stroke\nshowpage\n",
	extra_header: bytes = b"",
	trailer: bytes = b"",
) -> bytes:
	"""
	Build a small DSC conforming PostScript document.

	Args:
		bounding_box: Value of the %%BoundingBox comment, or None to omit.
		body: Drawing code.
		extra_header: Additional header comment lines.
		trailer: Lines placed after %%Trailer.

	Returns:
		Document bytes.
	"""
	lines = [b"%!PS-Adobe-3.0\n", b"%%Creator: pytest\n"]
	if bounding_box is not None:
		lines.append(b"%%BoundingBox: " + bounding_box.encode("ascii") + b"\n")
	lines.append(extra_header)
	lines.append(b"%%EndComments\n")
	lines.append(body)
	if trailer:
		lines.append(b"%%Trailer\n")
		lines.append(trailer)
	lines.append(b"%%EOF\n")
	return b"".join(lines)


#============================================
def build_run_config(
	plan: pst.config.LayoutPlan,
	alignment: bool = False,
	input_name: str = "pattern.ps",
	title: str = "Test pattern",
) -> pst.config.RunConfig:
	"""
	Build a RunConfig on A4 media with a 5% cut margin.
	"""
	media = pst.config.Box(0.0, 0.0, 595.0, 842.0)
	return pst.config.RunConfig(
		input_name=input_name,
		media_name="A4",
		media=media,
		image=pst.config.Box(0.0, 0.0, 595.0, 842.0),
		cut_margin=pst.config.Margin(29.75, 42.1),
		white_margin=pst.config.Margin(0.0, 0.0),
		scale=plan.scale,
		poster=None,
		manual_feed=False,
		alignment=alignment,
		title=title,
		handle="abc123",
		verbose=0,
		lookup=lambda key: key,
	)


#============================================
@pytest.fixture
def a4_plan() -> pst.config.LayoutPlan:
	"""
	Plan an A4 image at scale 2 on A4 media with a 5% cut margin.
	"""
	return pst.layout.plan_layout(
		pst.config.Box(0.0, 0.0, 595.0, 842.0),
		pst.config.Box(0.0, 0.0, 595.0, 842.0),
		pst.config.Margin(29.75, 42.1),
		pst.config.Margin(0.0, 0.0),
		scale=2.0,
	)
