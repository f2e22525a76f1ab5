"""Command-line interface for the image_curation project."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from . import config
from .group.clustering import T_GROUP, group_metrics
from .group.similarity import calculate_similarity_matrix, pair_components, pairwise_scores
from .io.models import (
    DiversityOptions,
    ImageRecord,
    PageSection,
    SectionMatchingOptions,
    load_image_records,
)
from .io.outputs import write_json, write_ranking_table
from .pipeline import analyze_image_diversity, process_section_matching
from .rank.composite import build_diverse_image_set


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the image curation pipeline."""
    parser = argparse.ArgumentParser(
        description="Rank analysed product images and assign them to detail-page sections."
    )
    parser.add_argument(
        "--input",
        required=True,
        help="Path to a JSON file: a list of image records or {'images': [...], 'options': {...}}.",
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Directory path where JSON and parquet outputs will be written.",
    )
    parser.add_argument(
        "--sections",
        default=None,
        help="Section counts overriding the defaults, e.g. 'hero=1,gallery=2'.",
    )
    parser.add_argument(
        "--prefer-large",
        default=None,
        help="Comma-separated sections that reward large images, e.g. 'hero,features'.",
    )
    parser.add_argument("--quality-weight", type=float, default=None)
    parser.add_argument("--relevance-weight", type=float, default=None)
    parser.add_argument("--diversity-weight", type=float, default=None)
    parser.add_argument(
        "--prioritize-quality",
        action="store_true",
        help="Weight quality more heavily in the overall ranking.",
    )
    parser.add_argument(
        "--prioritize-content",
        action="store_true",
        help="Weight content relevance more heavily in the overall ranking.",
    )
    parser.add_argument("--min-diversity", type=float, default=None)
    parser.add_argument("--max-group-size", type=int, default=None)
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Skip the KV result cache even when it is configured.",
    )
    parser.add_argument(
        "--debug-pairs",
        nargs="?",
        const=20,
        type=int,
        metavar="N",
        default=0,
        help="Show the top N pairwise similarity scores (default 20).",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def read_input(path: Path) -> tuple[list[Any], Mapping[str, Any]]:
    """Return the raw image payloads and options mapping stored in *path*."""
    if not path.exists():
        raise FileNotFoundError(f"Input file does not exist: {path}")
    data = json.loads(path.read_text(encoding="utf-8-sig"))
    if isinstance(data, list):
        return data, {}
    if isinstance(data, dict) and isinstance(data.get("images"), list):
        options = data.get("options")
        return data["images"], options if isinstance(options, dict) else {}
    raise ValueError("input must be a JSON list or an object with an 'images' list")


def parse_section_counts(value: str | None) -> dict[PageSection, int]:
    """Parse ``'hero=1,gallery=2'`` into section counts, ignoring unknown sections."""
    counts: dict[PageSection, int] = {}
    if not value:
        return counts
    for item in value.split(","):
        name, _, raw_count = item.partition("=")
        section = PageSection.parse(name)
        if section is None:
            print(f"[warn] unknown section '{name.strip()}' ignored")
            continue
        try:
            counts[section] = max(0, int(raw_count))
        except ValueError:
            print(f"[warn] invalid count for section '{section.value}' ignored")
    return counts


def build_options(
    args: argparse.Namespace, payload_options: Mapping[str, Any]
) -> tuple[DiversityOptions, SectionMatchingOptions]:
    """Combine options from the input file with command-line overrides."""
    diversity = DiversityOptions.from_dict(payload_options)
    sections = SectionMatchingOptions.from_dict(payload_options)

    if args.prioritize_quality:
        diversity.prioritize_quality = True
    if args.prioritize_content:
        diversity.prioritize_content = True
    if args.min_diversity is not None:
        diversity.min_diversity_score = args.min_diversity
    if args.max_group_size is not None:
        diversity.max_group_size = max(0, args.max_group_size)

    sections.section_counts.update(parse_section_counts(args.sections))
    if args.prefer_large is not None:
        preferred = (PageSection.parse(name) for name in args.prefer_large.split(","))
        sections.prefer_large_images = [section for section in preferred if section]
    if args.quality_weight is not None:
        sections.quality_weight = args.quality_weight
    if args.relevance_weight is not None:
        sections.relevance_weight = args.relevance_weight
    if args.diversity_weight is not None:
        sections.diversity_weight = args.diversity_weight
    return diversity, sections


def _debug_pairs(images: list[ImageRecord], limit: int) -> None:
    """Compute pairwise similarity scores and print the strongest matches."""
    if limit <= 0:
        return
    if len(images) < 2:
        print("[pairs] need at least two images for pairwise debug")
        return
    matrix = calculate_similarity_matrix(images)
    by_url = {image.url: image for image in images}
    edges = sorted(pairwise_scores(images, matrix), key=lambda item: item[2], reverse=True)
    top_edges = edges[:limit]
    print(f"[pairs] showing top {len(top_edges)} of {len(edges)} pairs (group > {T_GROUP:.2f})")
    for index, (left, right, score) in enumerate(top_edges, start=1):
        components = pair_components(by_url[left], by_url[right])
        summary = ", ".join(
            f"{factor.value}={value:.3f}" for factor, value in components.items()
        )
        print(f"  {index}. {left} <-> {right} score={score:.3f} ({summary or 'no factors'})")


def main(argv: Iterable[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, config.IMAGE_CURATION_LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        payloads, payload_options = read_input(Path(args.input))
    except ValueError as exc:
        print(f"[error] {args.input}: {exc}")
        return 2

    images = load_image_records(payloads)
    print(f"Images: {len(images)} valid of {len(payloads)}")
    diversity_options, section_options = build_options(args, payload_options)

    cache = None if args.no_cache else config.build_result_cache()
    analysis = analyze_image_diversity(
        images, diversity_options, cache=cache, show_progress=True
    )
    image_set = build_diverse_image_set(analysis, diversity_options.target_categories)
    outcome = process_section_matching(analysis.images, section_options)

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    metrics = group_metrics(analysis.similarity_groups, len(images))
    write_json(out_dir / "analysis.json", analysis.to_dict())
    write_json(out_dir / "recommendations.json", image_set.to_dict())
    write_json(out_dir / "sections.json", outcome.to_dict())
    write_json(out_dir / "groups.json", analysis.similarity_groups)
    write_json(out_dir / "metrics.json", metrics)
    ranking_path = write_ranking_table(out_dir / "ranking.parquet", analysis.images)
    if ranking_path:
        print(f"[ranking] wrote {len(analysis.images)} rows to {ranking_path}")

    print(f"Groups: {metrics['groups']}")
    print(f"Largest group: {metrics['largest_group']} images")
    print(f"Diverse picks: {len(analysis.diverse)}")
    for section, section_images in outcome.matching_result.items():
        layout = outcome.layout_recommendations.get(section)
        layout_label = layout.layout if layout else "-"
        print(f"  {section.value}: {len(section_images)} image(s), layout {layout_label}")

    if args.debug_pairs:
        _debug_pairs(images, args.debug_pairs)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
