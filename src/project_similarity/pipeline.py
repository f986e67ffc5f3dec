"""
Offline precomputation of the similarity index.

Builds the shared corpus statistics once, ranks every project against the whole
corpus and collects the results. Cost is quadratic in corpus size, so this runs once
per data refresh rather than per request.

Usage:
    from project_similarity.pipeline import run_pipeline

    run_pipeline("data/projects.json", "data/similarities.json")
"""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from tqdm import tqdm

from project_similarity.config import SimilarityConfig
from project_similarity.corpus import ProjectCorpus
from project_similarity.index import SimilarityIndex, SimilarProject, utc_timestamp
from project_similarity.ranking import top_similar
from project_similarity.records import Project, load_projects


def build_similarity_index(
    projects: Iterable[Project],
    config: SimilarityConfig | None = None,
    generated_at: str | None = None,
    progress: bool = False,
) -> SimilarityIndex:
    """
    Rank every project against the full corpus.

    Args:
        projects: The complete corpus.
        config: Weights, N, financial log spread and worker count.
        generated_at: Timestamp to record (default: now, UTC).
        progress: Show a tqdm progress bar.

    Returns:
        Index with one entry per project, including projects with no neighbours.
    """
    config = config or SimilarityConfig()
    corpus = ProjectCorpus(projects)
    if len(set(corpus.ids)) != len(corpus):
        raise ValueError("Project ids must be unique across the corpus.")
    # Statistics must be complete before any worker reads them.
    corpus.warm()

    def rank_single(project: Project) -> tuple[SimilarProject, ...]:
        edges = top_similar(project, corpus, config.top_n, config.weights, config.max_log_diff)
        return tuple(SimilarProject(edge.target_id, edge.score) for edge in edges)

    bar = {"total": len(corpus), "desc": "Ranking", "unit": "project", "disable": not progress}
    if config.num_workers == 1:
        results = [rank_single(project) for project in tqdm(corpus.projects, **bar)]
    else:
        with ThreadPoolExecutor(max_workers=config.num_workers) as executor:
            # Advance the bar as results complete, not as work is submitted.
            results = list(tqdm(executor.map(rank_single, corpus.projects), **bar))

    similarities = {project.id: entries for project, entries in zip(corpus.projects, results)}
    return SimilarityIndex(generated_at=generated_at or utc_timestamp(), similarities=similarities)


def run_pipeline(
    projects_path: str | Path,
    output_path: str | Path,
    config: SimilarityConfig | None = None,
    progress: bool = False,
) -> SimilarityIndex:
    """Load the dataset, build the index and write it to ``output_path``."""
    projects = load_projects(projects_path)
    index = build_similarity_index(projects, config, progress=progress)
    index.save(output_path)
    return index
