from pathlib import Path

import pytest

from azslsense.analysis.index import SymbolIndex

CORPUS = Path(__file__).parent / "fixtures" / "corpus"


@pytest.fixture
def corpus_root() -> Path:
    return CORPUS


@pytest.fixture
def corpus_index() -> SymbolIndex:
    index = SymbolIndex()
    index.rebuild(CORPUS)
    return index
