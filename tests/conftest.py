"""
Pytest configuration and shared fixtures
"""

import pytest
import os
import tempfile
import shutil


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files"""
    dirpath = tempfile.mkdtemp()
    yield dirpath
    shutil.rmtree(dirpath)


@pytest.fixture
def sample_text():
    """Sample text for testing"""
    return """the quick brown fox jumps over the lazy dog
the dog was really lazy
the fox was very quick and brown
quick brown foxes are amazing animals
lazy dogs sleep all day"""


@pytest.fixture
def sample_input_file(temp_dir, sample_text):
    """Create a sample input file for testing"""
    filepath = os.path.join(temp_dir, 'input.txt')
    with open(filepath, 'w') as f:
        f.write(sample_text)
    return filepath


@pytest.fixture
def write_input(temp_dir):
    """Factory writing text to a named file in the temp directory"""
    def _write(text, name='input.txt'):
        filepath = os.path.join(temp_dir, name)
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(text)
        return filepath
    return _write
