"""
Corpus statistics and TF-IDF vectors for project text.

The IDF table is built once per corpus and shared by every pairwise comparison in a run:

    idf(t) = ln(N / (df(t) + 1))

Document vectors use length-normalized term frequency:

    w(t, d) = (count(t, d) / |d|) * idf(t)

Tokens absent from the IDF table get weight 0. ``ProjectCorpus`` caches tokenized
documents, the IDF table, per-document vectors and a sparse TF-IDF matrix so that one
record can be compared against the whole corpus with a single sparse product.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence
from functools import cached_property
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterator

import numpy as np
from scipy.sparse import csr_matrix

from project_similarity.tokenizer import tokenize

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from project_similarity.records import Project

Tokenizer = Callable[[str], list[str]]


# =============================================================================
# Pure builders
# =============================================================================


def idf_from_document_frequency(document_frequency: Mapping[str, int], n_docs: int) -> Mapping[str, float]:
    """IDF table from per-token document counts over ``n_docs`` documents."""
    idf = {term: math.log(n_docs / (df + 1)) for term, df in document_frequency.items()}
    return MappingProxyType(idf)


def idf_from_documents(documents: Iterable[Sequence[str]]) -> Mapping[str, float]:
    """IDF table from already-tokenized documents (presence per document, not counts)."""
    document_frequency: Counter[str] = Counter()
    n_docs = 0
    for doc in documents:
        document_frequency.update(set(doc))
        n_docs += 1
    return idf_from_document_frequency(document_frequency, n_docs)


def build_idf(texts: Iterable[str], tokenizer: Tokenizer = tokenize) -> Mapping[str, float]:
    """
    Build the inverse-document-frequency table over a text corpus.

    Args:
        texts: One string per document.
        tokenizer: Text-to-tokens callable.

    Returns:
        Read-only mapping token -> idf. Empty for an empty corpus.
    """
    return idf_from_documents(tokenizer(text) for text in texts)


def weigh_tokens(tokens: Sequence[str], idf: Mapping[str, float]) -> dict[str, float]:
    """TF-IDF weights for a tokenized document."""
    if not tokens:
        return {}
    total = len(tokens)
    return {term: (count / total) * idf.get(term, 0.0) for term, count in Counter(tokens).items()}


def vectorize(text: str, idf: Mapping[str, float], tokenizer: Tokenizer = tokenize) -> dict[str, float]:
    """Sparse TF-IDF vector (token -> weight) for one document."""
    return weigh_tokens(tokenizer(text), idf)


def cosine_similarity(vector_a: Mapping[str, float], vector_b: Mapping[str, float]) -> float:
    """Cosine of two sparse vectors; 0.0 when either has zero norm."""
    if len(vector_a) > len(vector_b):
        vector_a, vector_b = vector_b, vector_a
    dot = sum(value * vector_b.get(term, 0.0) for term, value in vector_a.items())
    norm_a = math.sqrt(sum(value * value for value in vector_a.values()))
    norm_b = math.sqrt(sum(value * value for value in vector_b.values()))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


# =============================================================================
# Project corpus
# =============================================================================


class ProjectCorpus:
    """
    A tokenized collection of projects with shared, read-only text statistics.

    Everything derived from the text is computed lazily on first access and never
    modified afterwards. Call ``warm()`` before sharing an instance across threads.

    Args:
        projects: Records in corpus order.
        tokenizer: Text-to-tokens callable (default: Japanese segmenter).
    """

    def __init__(self, projects: Iterable[Project], tokenizer: Tokenizer | None = None):
        self.projects: tuple[Project, ...] = tuple(projects)
        self.tokenizer = tokenizer or tokenize
        self.ids = [project.id for project in self.projects]
        self._id_to_idx = {project_id: idx for idx, project_id in enumerate(self.ids)}

    def __len__(self) -> int:
        return len(self.projects)

    def __getitem__(self, index: int) -> Project:
        return self.projects[index]

    def __iter__(self) -> Iterator[Project]:
        return iter(self.projects)

    @cached_property
    def documents(self) -> tuple[tuple[str, ...], ...]:
        """Tokenized text of each project."""
        return tuple(tuple(self.tokenizer(project.text)) for project in self.projects)

    @cached_property
    def document_frequency(self) -> Mapping[str, int]:
        """Number of documents each token appears in."""
        return MappingProxyType(Counter(term for doc in self.documents for term in set(doc)))

    @cached_property
    def inverse_document_frequency(self) -> Mapping[str, float]:
        return idf_from_document_frequency(self.document_frequency, len(self))

    @cached_property
    def vocabulary(self) -> Mapping[str, int]:
        """Column index of each token in ``tfidf_matrix``."""
        return MappingProxyType({term: idx for idx, term in enumerate(self.inverse_document_frequency)})

    @cached_property
    def vectors(self) -> tuple[Mapping[str, float], ...]:
        idf = self.inverse_document_frequency
        return tuple(MappingProxyType(weigh_tokens(doc, idf)) for doc in self.documents)

    @cached_property
    def tfidf_matrix(self) -> csr_matrix:
        """Sparse (n_projects, vocab_size) matrix of TF-IDF weights."""
        rows, cols, data = [], [], []
        for row, vector in enumerate(self.vectors):
            for term, weight in vector.items():
                if weight != 0.0:
                    rows.append(row)
                    cols.append(self.vocabulary[term])
                    data.append(weight)
        return csr_matrix(
            (np.array(data, dtype=np.float64), (np.array(rows, dtype=np.int64), np.array(cols, dtype=np.int64))),
            shape=(len(self), len(self.vocabulary)),
        )

    @cached_property
    def vector_norms(self) -> NDArray[np.float64]:
        return np.array(
            [math.sqrt(sum(w * w for w in vector.values())) for vector in self.vectors],
            dtype=np.float64,
        )

    def warm(self) -> "ProjectCorpus":
        """Compute every cached statistic now."""
        _ = self.tfidf_matrix, self.vector_norms
        return self

    def index_of(self, project: Project) -> int | None:
        """Position of ``project`` in the corpus, matched by id."""
        return self._id_to_idx.get(project.id)

    def get_by_id(self, project_id: str) -> Project | None:
        idx = self._id_to_idx.get(project_id)
        return None if idx is None else self.projects[idx]

    def vector_for(self, project: Project) -> Mapping[str, float]:
        """TF-IDF vector of a project, cached when the project belongs to the corpus."""
        idx = self.index_of(project)
        if idx is not None and self.projects[idx] == project:
            return self.vectors[idx]
        return vectorize(project.text, self.inverse_document_frequency, self.tokenizer)

    def _row_for(self, project: Project) -> tuple[csr_matrix, float]:
        idx = self.index_of(project)
        if idx is not None and self.projects[idx] == project:
            return self.tfidf_matrix[idx], float(self.vector_norms[idx])
        vector = self.vector_for(project)
        cols = [self.vocabulary[t] for t, w in vector.items() if w != 0.0 and t in self.vocabulary]
        data = [w for t, w in vector.items() if w != 0.0 and t in self.vocabulary]
        row = csr_matrix(
            (np.array(data, dtype=np.float64), (np.zeros(len(cols), dtype=np.int64), np.array(cols, dtype=np.int64))),
            shape=(1, len(self.vocabulary)),
        )
        return row, math.sqrt(sum(w * w for w in data))

    def text_scores(self, project: Project) -> NDArray[np.float64]:
        """
        Cosine similarity of ``project``'s text against every corpus document.

        Returns:
            Array of shape (n_projects,), clipped to [0, 1]. Zero where either
            vector has zero norm.
        """
        if len(self) == 0 or len(self.vocabulary) == 0:
            return np.zeros(len(self), dtype=np.float64)
        row, norm = self._row_for(project)
        dots = np.asarray((self.tfidf_matrix @ row.T).toarray(), dtype=np.float64).ravel()
        denominators = self.vector_norms * norm
        scores = np.zeros(len(self), dtype=np.float64)
        np.divide(dots, denominators, out=scores, where=denominators > 0)
        return np.clip(scores, 0.0, 1.0)
