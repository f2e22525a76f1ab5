"""Data models shared across the image curation pipeline."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping

logger = logging.getLogger(__name__)

CATEGORY_NAMES: tuple[str, ...] = ("main", "detail", "lifestyle", "specification")
DEFAULT_TARGET_CATEGORIES: Dict[str, int] = {
    "main": 1,
    "detail": 3,
    "lifestyle": 1,
    "specification": 1,
}

_UNKNOWN_SECTION = "other"
_UNKNOWN_OBJECT = "unknown"


class InvalidImageRecordError(ValueError):
    """Raised when an input payload cannot be interpreted as an image record."""


class PageSection(str, Enum):
    """Named region of a generated detail page."""

    HERO = "hero"
    FEATURES = "features"
    DETAILS = "details"
    USAGE = "usage"
    SPECS = "specs"
    GALLERY = "gallery"
    LIFESTYLE = "lifestyle"
    ACCESSORIES = "accessories"
    COMPARISON = "comparison"

    @classmethod
    def parse(cls, value: Any) -> "PageSection | None":
        """Return the section named by *value*, or ``None`` if it is unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(slots=True)
class Resolution:
    """Pixel dimensions reported by the quality assessor."""

    width: int
    height: int
    score: float | None = None

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(slots=True)
class QualityAssessment:
    """Read-only view of an external image quality assessment."""

    overall_score: float
    resolution: Resolution | None = None
    grade: str | None = None
    recommendation: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "QualityAssessment | None":
        """Parse a camelCase quality payload, returning ``None`` when unusable."""
        overall = payload.get("overall")
        if not isinstance(overall, Mapping) or not _is_number(overall.get("score")):
            logger.debug("Quality payload without a numeric overall.score; ignoring")
            return None
        return cls(
            overall_score=_unit(overall["score"]),
            resolution=_parse_resolution(payload.get("resolution")),
            grade=_optional_str(overall.get("grade")),
            recommendation=_optional_str(overall.get("recommendation")),
        )

    def to_dict(self) -> Dict[str, Any]:
        overall: Dict[str, Any] = {"score": self.overall_score}
        if self.grade is not None:
            overall["grade"] = self.grade
        if self.recommendation is not None:
            overall["recommendation"] = self.recommendation
        payload: Dict[str, Any] = {"overall": overall}
        if self.resolution is not None:
            resolution: Dict[str, Any] = {
                "width": self.resolution.width,
                "height": self.resolution.height,
            }
            if self.resolution.score is not None:
                resolution["score"] = self.resolution.score
            payload["resolution"] = resolution
        return payload


@dataclass(slots=True)
class ContentType:
    """Content-type flags set by the content classifier."""

    is_product: bool = False
    is_lifestyle: bool = False
    is_infographic: bool = False
    is_person: bool = False

    @property
    def label(self) -> str:
        """Return the dominant flag, checked in product/lifestyle/infographic/person order."""
        if self.is_product:
            return "product"
        if self.is_lifestyle:
            return "lifestyle"
        if self.is_infographic:
            return "infographic"
        if self.is_person:
            return "person"
        return "other"


@dataclass(slots=True)
class ContentAnalysis:
    """Read-only view of an external content/tag analysis."""

    content_type: ContentType = field(default_factory=ContentType)
    recommended_section: str = _UNKNOWN_SECTION
    recommended_reason: str | None = None
    tags: List[str] = field(default_factory=list)
    mood_description: str | None = None
    dominant_color: str | None = None
    primary_color: str | None = None
    secondary_colors: List[str] = field(default_factory=list)
    main_object: str = _UNKNOWN_OBJECT
    other_objects: List[str] = field(default_factory=list)
    product_focus: float = 0.0
    commercial_value: float = 0.0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ContentAnalysis":
        """Parse a camelCase content payload; malformed parts fall back to neutral values."""
        flags = _mapping(payload.get("contentType"))
        recommended = _mapping(payload.get("recommendedUse"))
        mood = _mapping(payload.get("mood"))
        colors = _mapping(payload.get("colorScheme"))
        objects = _mapping(payload.get("objects"))
        return cls(
            content_type=ContentType(
                is_product=bool(flags.get("isProduct", False)),
                is_lifestyle=bool(flags.get("isLifestyle", False)),
                is_infographic=bool(flags.get("isInfographic", False)),
                is_person=bool(flags.get("isPerson", False)),
            ),
            recommended_section=_optional_str(recommended.get("section"))
            or _UNKNOWN_SECTION,
            recommended_reason=_optional_str(recommended.get("reason")),
            tags=_str_list(mood.get("tags")),
            mood_description=_optional_str(mood.get("description")),
            dominant_color=_optional_str(colors.get("dominant")),
            primary_color=_optional_str(colors.get("primary")),
            secondary_colors=_str_list(colors.get("secondary")),
            main_object=_optional_str(objects.get("main")) or _UNKNOWN_OBJECT,
            other_objects=_str_list(objects.get("others")),
            product_focus=_nested_score(payload.get("productFocus")),
            commercial_value=_nested_score(payload.get("commercialValue")),
        )

    def to_dict(self) -> Dict[str, Any]:
        recommended: Dict[str, Any] = {"section": self.recommended_section}
        if self.recommended_reason is not None:
            recommended["reason"] = self.recommended_reason
        mood: Dict[str, Any] = {"tags": list(self.tags)}
        if self.mood_description is not None:
            mood["description"] = self.mood_description
        colors: Dict[str, Any] = {"secondary": list(self.secondary_colors)}
        if self.dominant_color is not None:
            colors["dominant"] = self.dominant_color
        if self.primary_color is not None:
            colors["primary"] = self.primary_color
        return {
            "contentType": {
                "isProduct": self.content_type.is_product,
                "isLifestyle": self.content_type.is_lifestyle,
                "isInfographic": self.content_type.is_infographic,
                "isPerson": self.content_type.is_person,
            },
            "recommendedUse": recommended,
            "mood": mood,
            "colorScheme": colors,
            "objects": {"main": self.main_object, "others": list(self.other_objects)},
            "productFocus": {"score": self.product_focus},
            "commercialValue": {"score": self.commercial_value},
        }


@dataclass(slots=True)
class ImageRecord:
    """A scraped image together with its upstream analyses and derived scores."""

    url: str
    quality: QualityAssessment | None = None
    content: ContentAnalysis | None = None
    diversity_score: float | None = None
    similarity_groups: List[str] | None = None
    overall_score: float | None = None

    @classmethod
    def from_dict(cls, payload: Any) -> "ImageRecord":
        """Validate *payload* and return an :class:`ImageRecord`.

        The URL is read from ``url`` or ``imageUrl``. A payload without a
        string URL raises :class:`InvalidImageRecordError`; every other field
        is optional and degrades to "absent" when malformed.
        """
        if not isinstance(payload, Mapping):
            raise InvalidImageRecordError("image record must be a JSON object")
        url = payload.get("url", payload.get("imageUrl"))
        if not isinstance(url, str) or not url.strip():
            raise InvalidImageRecordError("image record requires a string 'url'")

        quality_payload = payload.get("quality")
        content_payload = payload.get("content")
        groups = payload.get("similarityGroups")
        return cls(
            url=url,
            quality=QualityAssessment.from_dict(quality_payload)
            if isinstance(quality_payload, Mapping)
            else None,
            content=ContentAnalysis.from_dict(content_payload)
            if isinstance(content_payload, Mapping)
            else None,
            diversity_score=_optional_unit(payload.get("diversityScore")),
            similarity_groups=_str_list(groups) if isinstance(groups, list) else None,
            overall_score=_optional_unit(payload.get("overallScore")),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"url": self.url}
        if self.quality is not None:
            payload["quality"] = self.quality.to_dict()
        if self.content is not None:
            payload["content"] = self.content.to_dict()
        if self.diversity_score is not None:
            payload["diversityScore"] = self.diversity_score
        if self.similarity_groups is not None:
            payload["similarityGroups"] = list(self.similarity_groups)
        if self.overall_score is not None:
            payload["overallScore"] = self.overall_score
        return payload


@dataclass(slots=True)
class DiversityOptions:
    """Tuning knobs for diversity analysis and composite ranking."""

    prioritize_quality: bool = False
    prioritize_content: bool = False
    min_diversity_score: float = 0.3
    max_group_size: int = 3
    target_categories: Dict[str, int] = field(
        default_factory=lambda: dict(DEFAULT_TARGET_CATEGORIES)
    )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> "DiversityOptions":
        options = cls()
        if not payload:
            return options
        options.prioritize_quality = bool(payload.get("prioritizeQuality", False))
        options.prioritize_content = bool(payload.get("prioritizeContent", False))
        if _is_number(payload.get("minDiversityScore")):
            options.min_diversity_score = float(payload["minDiversityScore"])
        if _is_number(payload.get("maxGroupSize")):
            options.max_group_size = max(0, int(payload["maxGroupSize"]))
        targets = payload.get("targetCategories")
        if isinstance(targets, Mapping):
            for name in CATEGORY_NAMES:
                if _is_number(targets.get(name)):
                    options.target_categories[name] = max(0, int(targets[name]))
        return options


@dataclass(slots=True)
class SectionMatchingOptions:
    """Options for scoring images against page sections."""

    section_counts: Dict[PageSection, int] = field(default_factory=dict)
    prefer_large_images: List[PageSection] = field(
        default_factory=lambda: [PageSection.HERO, PageSection.FEATURES]
    )
    quality_weight: float = 0.3
    relevance_weight: float = 0.5
    diversity_weight: float = 0.2

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> "SectionMatchingOptions":
        """Parse a JSON options payload, dropping unknown section names."""
        options = cls()
        if not payload:
            return options
        counts = payload.get("sectionCounts")
        if isinstance(counts, Mapping):
            for name, count in counts.items():
                section = PageSection.parse(name)
                if section is None or not _is_number(count):
                    logger.debug("Ignoring section count %r=%r", name, count)
                    continue
                options.section_counts[section] = max(0, int(count))
        prefer = payload.get("preferLargeImages")
        if isinstance(prefer, list):
            options.prefer_large_images = _parse_sections(prefer)
        for key, attr in (
            ("qualityWeight", "quality_weight"),
            ("relevanceWeight", "relevance_weight"),
            ("diversityWeight", "diversity_weight"),
        ):
            if _is_number(payload.get(key)):
                setattr(options, attr, float(payload[key]))
        return options


@dataclass(slots=True)
class LayoutRecommendation:
    """Presentation hint for a page section."""

    layout: str
    columns: int | None = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"layout": self.layout}
        if self.columns is not None:
            payload["columns"] = self.columns
        return payload


@dataclass(slots=True)
class DiversityAnalysis:
    """Ranked images, similarity groups and recommendations for one image set."""

    images: List[ImageRecord] = field(default_factory=list)
    similarity_groups: List[List[str]] = field(default_factory=list)
    diverse: List[ImageRecord] = field(default_factory=list)
    by_category: Dict[str, List[ImageRecord]] = field(
        default_factory=lambda: {name: [] for name in CATEGORY_NAMES}
    )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DiversityAnalysis":
        recommendations = payload["recommendations"]
        by_category = recommendations.get("byCategory", {})
        return cls(
            images=[ImageRecord.from_dict(item) for item in payload["images"]],
            similarity_groups=[
                [str(url) for url in group] for group in payload["similarityGroups"]
            ],
            diverse=[ImageRecord.from_dict(item) for item in recommendations["diverse"]],
            by_category={
                name: [ImageRecord.from_dict(item) for item in by_category.get(name, [])]
                for name in CATEGORY_NAMES
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "images": [image.to_dict() for image in self.images],
            "similarityGroups": [list(group) for group in self.similarity_groups],
            "recommendations": {
                "diverse": [image.to_dict() for image in self.diverse],
                "byCategory": {
                    name: [image.to_dict() for image in self.by_category.get(name, [])]
                    for name in CATEGORY_NAMES
                },
            },
        }


@dataclass(slots=True)
class DiverseImageSet:
    """Per-category picks topped up with diverse images."""

    main_images: List[ImageRecord] = field(default_factory=list)
    detail_images: List[ImageRecord] = field(default_factory=list)
    lifestyle_images: List[ImageRecord] = field(default_factory=list)
    specification_images: List[ImageRecord] = field(default_factory=list)
    all_images: List[ImageRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mainImages": [image.to_dict() for image in self.main_images],
            "detailImages": [image.to_dict() for image in self.detail_images],
            "lifestyleImages": [image.to_dict() for image in self.lifestyle_images],
            "specificationImages": [
                image.to_dict() for image in self.specification_images
            ],
            "allImages": [image.to_dict() for image in self.all_images],
        }


@dataclass(slots=True)
class SectionMatchingOutcome:
    """Deduplicated section assignments plus layout hints."""

    matching_result: Dict[PageSection, List[ImageRecord]] = field(default_factory=dict)
    layout_recommendations: Dict[PageSection, LayoutRecommendation] = field(
        default_factory=dict
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matchingResult": {
                section.value: [image.to_dict() for image in images]
                for section, images in self.matching_result.items()
            },
            "layoutRecommendations": {
                section.value: layout.to_dict()
                for section, layout in self.layout_recommendations.items()
            },
        }


def load_image_records(payloads: Iterable[Any]) -> List[ImageRecord]:
    """Return valid records from *payloads*, logging and skipping invalid ones."""
    records: List[ImageRecord] = []
    for index, payload in enumerate(payloads):
        try:
            records.append(ImageRecord.from_dict(payload))
        except InvalidImageRecordError as exc:
            logger.warning("Skipping image record %d: %s", index, exc)
    return records


def _parse_sections(values: Iterable[Any]) -> List[PageSection]:
    sections: List[PageSection] = []
    for value in values:
        section = PageSection.parse(value)
        if section is not None and section not in sections:
            sections.append(section)
    return sections


def _parse_resolution(value: Any) -> Resolution | None:
    if not isinstance(value, Mapping):
        return None
    width, height = value.get("width"), value.get("height")
    if not _is_number(width) or not _is_number(height):
        logger.debug("Resolution without numeric width/height; ignoring")
        return None
    return Resolution(
        width=max(0, int(width)),
        height=max(0, int(height)),
        score=_optional_unit(value.get("score")),
    )


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _unit(value: Any) -> float:
    return float(max(0.0, min(1.0, float(value))))


def _optional_unit(value: Any) -> float | None:
    return _unit(value) if _is_number(value) else None


def _nested_score(value: Any) -> float:
    if isinstance(value, Mapping) and _is_number(value.get("score")):
        return _unit(value["score"])
    return 0.0


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]
