"""
Turns aggregated statistics into the SVG badges and the text summary.

Templates are plain files with `{{ token }}` placeholders. Rendered SVGs
are parsed with lxml before they are written so a broken template never
replaces a good badge.
"""

import re
from dataclasses import dataclass
from pathlib import Path

from lxml import etree

from .errors import RenderError

OVERVIEW_TEMPLATE = "overview.svg"
LANGUAGES_TEMPLATE = "languages.svg"
OVERVIEW_OUTPUT = "overview.svg"
LANGUAGES_REPO_OUTPUT = "languages-repo.svg"
LANGUAGES_COMMIT_OUTPUT = "languages-commit.svg"
SUMMARY_OUTPUT = "stats-summary.txt"

LANGUAGES_REPO_TITLE = "Top Languages by Repo"
LANGUAGES_COMMIT_TITLE = "Top Languages by Commits"

START_MARKER = "<!--START_SECTION:stats-summary-->"
END_MARKER = "<!--END_SECTION:stats-summary-->"

DEFAULT_COLOR = "#000000"
DELAY_BETWEEN_MS = 150

TOKEN_PATTERN = re.compile(r"{{ (\w+) }}")

LANGUAGE_ITEM = """
<li style="animation-delay: {delay}ms;">
<svg xmlns="http://www.w3.org/2000/svg" class="octicon" style="fill:{color};"
viewBox="0 0 16 16" version="1.1" width="16" height="16"><path
fill-rule="evenodd" d="M8 4a4 4 0 100 8 4 4 0 000-8z"></path></svg>
<span class="lang">{name}</span>
<span class="percent">{percent:.2f}%</span>
</li>

"""

PROGRESS_ITEM = (
    '<span style="background-color: {color};width: {width}%;margin-right: {margin}%;"'
    ' class="progress-item"></span>'
)


@dataclass(frozen=True)
class Segment:
    name: str
    color: str
    proportion: float
    width: str
    margin: str
    delay: int


def escape_xml(text):
    """Escape special XML characters"""
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def format_plural(unit):
    """Returns 's' unless the count is exactly one"""
    return "" if unit == 1 else "s"


def render_template(template, values):
    """Replace every {{ token }} that has a value; unknown tokens are left alone"""

    def substitute(match):
        key = match.group(1)
        return str(values[key]) if key in values else match.group(0)

    return TOKEN_PATTERN.sub(substitute, template)


def read_template(template_dir, name):
    path = Path(template_dir) / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise RenderError(f"Could not read template {path}: {e}") from e


def write_output(output_dir, filename, content, check_svg=False):
    """Write one artifact, creating the output directory on first use"""
    if check_svg:
        try:
            etree.fromstring(content.encode("utf-8"))
        except etree.XMLSyntaxError as e:
            raise RenderError(f"{filename} is not well-formed SVG: {e}") from e

    output_dir = Path(output_dir)
    path = output_dir / filename
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise RenderError(f"Could not write {path}: {e}") from e
    print(f"       Updated: {path}")
    return path


def render_overview(stats, template_dir, output_dir):
    """Fill in the overview badge"""
    template = read_template(template_dir, OVERVIEW_TEMPLATE)
    output = render_template(
        template,
        {
            "name": escape_xml(stats.name or "Unknown"),
            "stars": f"{stats.total_stars:,}",
            "forks": f"{stats.total_forks:,}",
            "contributions": f"{stats.total_contributions:,}",
            "commits": f"{stats.total_commits:,}",
            "yearsAgo": stats.years_ago,
            "repos": f"{stats.repo_count:,}",
        },
    )
    return write_output(output_dir, OVERVIEW_OUTPUT, output, check_svg=True)


def language_segments(languages):
    """
    Lay out the proportional language bar.

    Languages are sorted by count, largest first, and each one covers its
    share of the bar. A segment takes 98% of its share as width and 2% as
    trailing margin; a segment holding more than half of the bar gives only
    1% to its margin, and the last segment has no margin so the bar ends
    flush.
    """
    ordered = sorted(languages.values(), key=lambda lang: lang.count, reverse=True)

    segments = []
    for i, lang in enumerate(ordered):
        proportion = lang.share

        ratio = (0.98, 0.02)
        if proportion > 50:
            ratio = (0.99, 0.01)
        if i == len(ordered) - 1:
            ratio = (1.0, 0.0)

        segments.append(
            Segment(
                name=lang.name,
                color=lang.color or DEFAULT_COLOR,
                proportion=proportion,
                width=f"{ratio[0] * proportion:.3f}",
                margin=f"{ratio[1] * proportion:.3f}",
                delay=i * DELAY_BETWEEN_MS,
            )
        )
    return segments


def render_languages(languages, filename, title, template_dir, output_dir):
    """Fill in a languages badge from one language distribution"""
    template = read_template(template_dir, LANGUAGES_TEMPLATE)

    progress = ""
    lang_list = ""
    for segment in language_segments(languages):
        color = escape_xml(segment.color)
        progress += PROGRESS_ITEM.format(
            color=color, width=segment.width, margin=segment.margin
        )
        lang_list += LANGUAGE_ITEM.format(
            delay=segment.delay,
            color=color,
            name=escape_xml(segment.name),
            percent=segment.proportion,
        )

    output = render_template(
        template,
        {"progress": progress, "lang_list": lang_list, "title": escape_xml(title)},
    )
    return write_output(output_dir, filename, output, check_svg=True)


def summary_text(stats, profile, intro=""):
    """The one-paragraph summary spliced into the README"""
    years = stats.years_ago
    summary = (
        f"I joined GitHub **{years} year{format_plural(years)}** ago and since then "
        f"I have pushed **{stats.total_commits:,} commits**, "
        f"opened **{profile.issues:,} issues**, "
        f"and received **{stats.total_stars:,} stars** across my projects."
    )
    return f"{intro} {summary}" if intro else summary


def render_summary(stats, profile, output_dir, intro=""):
    """Write the text summary and return its contents"""
    summary = summary_text(stats, profile, intro)
    write_output(output_dir, SUMMARY_OUTPUT, summary)
    return summary


def _marker_bounds(document, start_marker, end_marker):
    start = document.find(start_marker)
    if start == -1:
        return None
    inner_start = start + len(start_marker)
    end = document.find(end_marker, inner_start)
    if end == -1:
        return None
    return inner_start, end


def has_markers(document, start_marker=START_MARKER, end_marker=END_MARKER):
    return _marker_bounds(document, start_marker, end_marker) is not None


def splice(document, text, start_marker=START_MARKER, end_marker=END_MARKER):
    """
    Put `text` between the two markers of `document`.

    Only what lies strictly between the start marker and the first end
    marker after it changes. A document without such a pair is returned
    unchanged.
    """
    bounds = _marker_bounds(document, start_marker, end_marker)
    if bounds is None:
        return document
    inner_start, inner_end = bounds
    return f"{document[:inner_start]}\n{text}\n{document[inner_end:]}"


def update_readme(readme_path, text):
    """Splice the summary into the README; returns True if the file changed"""
    path = Path(readme_path)
    if not path.exists():
        print(f"       {path} not found, skipping README update")
        return False

    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            document = f.read()
    except OSError as e:
        raise RenderError(f"Could not read {path}: {e}") from e

    if not has_markers(document):
        print("       README markers not found, skipping update")
        return False

    updated = splice(document, text)
    if updated == document:
        print("       README already up to date")
        return False

    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(updated)
    except OSError as e:
        raise RenderError(f"Could not write {path}: {e}") from e
    print(f"       Updated: {path}")
    return True
