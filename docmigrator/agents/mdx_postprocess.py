"""Normalization of model output into site-ready MDX."""
import re
from dataclasses import dataclass, field
from typing import List, Set

from docmigrator.core.errors import ConversionQualityError
from docmigrator.core.slugs import MISSING, SlugResolver

COMPONENTS = [
    "Behavior",
    "Decl",
    "DeclDoc",
    "DescList",
    "Desc",
    "ParamDocList",
    "ParamDoc",
    "DocLink",
    "CHeader",
    "CppHeader",
    "FeatureTestMacro",
    "FeatureTestMacroValue",
    "DR",
    "DRList",
    "Revision",
    "RevisionBlock",
    "AutoCollapse",
    "FlexTable",
    "WG21PaperLink",
]
COMPONENTS_MODULE = "@components/index"

RAW_TAGS = ["div", "section", "span", "table", "thead", "tbody", "tr", "td", "th"]
RAW_TAG_RE = re.compile(r"<(?:%s)(?![\w-])" % "|".join(RAW_TAGS))
MAX_RAW_TAGS = 4

FENCE_RE = re.compile(r"```[\w-]*[^\S\n]*\n(.*)\n[^\S\n]*```", re.DOTALL)
MARKDOWN_LINK_RE = re.compile(r"(?<!!)\[(?P<text>[^\]]*)\]\((?P<target>/[^)\s]*)\)")


@dataclass
class ConvertedDocument:
    body: str
    components: Set[str] = field(default_factory=set)


def extract_fenced(content: str) -> str:
    """Payload of the outermost fenced block, or ``content`` unchanged when there is none."""
    content = content.strip()
    if "```mdx" in content:
        start = content.index("```mdx") + len("```mdx")
        end = content.rfind("```", start)
        # a truncated reply has no closing fence
        return content[start:end if end != -1 else None].strip()
    match = FENCE_RE.search(content)
    if match and content.startswith("```"):
        return match.group(1).strip()
    if content.startswith("```"):
        return content.partition("\n")[2].strip()
    return content


def strip_imports(content: str) -> str:
    return "\n".join(line for line in content.split("\n") if not line.startswith("import "))


def used_components(content: str) -> List[str]:
    used = [c for c in COMPONENTS if re.search(rf"<{c}(?=[\s>/])", content)]
    return sorted(used)


def import_statement(components: List[str]) -> str:
    return f"import {{ {', '.join(components)} }} from '{COMPONENTS_MODULE}';"


def link_key(target: str) -> str:
    """``/w/cpp/language/comments.html#x`` -> ``cpp/language/comments``."""
    path = target.split("#", 1)[0].strip("/")
    if path.startswith("w/"):
        path = path[2:]
    return re.sub(r"\.html?$", "", path)


def rewrite_links(content: str, slugs: SlugResolver) -> str:
    """Point in-corpus markdown links at their migrated location.

    Mapped targets get the destination slug, targets the table knows but
    leaves unmapped become a "not migrated" anchor that keeps the original
    target, and targets the table has never heard of are left alone.
    """
    def replace(match: re.Match) -> str:
        text, target = match.group("text"), match.group("target")
        dest = slugs.resolve(link_key(target))
        if dest is MISSING:
            return match.group(0)
        if dest is None:
            return f'<a href="{target}" data-not-migrated>{text}</a>'
        fragment = target[target.index("#"):] if "#" in target else ""
        return f"[{text}](/{dest.strip('/')}{fragment})"

    return MARKDOWN_LINK_RE.sub(replace, content)


def count_raw_tags(content: str) -> int:
    return len(RAW_TAG_RE.findall(content))


def check_quality(content: str) -> int:
    count = count_raw_tags(content)
    if count > MAX_RAW_TAGS:
        raise ConversionQualityError(
            f"Converted document still holds {count} raw HTML elements "
            f"(limit {MAX_RAW_TAGS}); conversion is probably incomplete",
            raw_tag_count=count,
        )
    return count


def postprocess(raw: str, slugs: SlugResolver) -> ConvertedDocument:
    content = strip_imports(extract_fenced(raw)).strip()
    if not content:
        raise ConversionQualityError("Converted document is empty", raw_tag_count=0)
    content = rewrite_links(content, slugs)
    components = used_components(content)
    if components:
        content = f"{import_statement(components)}\n\n{content}"
    check_quality(content)
    return ConvertedDocument(body=content, components=set(components))
