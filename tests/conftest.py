"""
Pytest fixtures for RepoMap Engine tests.
"""
import pytest
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from repomap_engine import RepoMapEngine, EngineConfig, GrammarRegistry, select_grammar


class MemoryFileSystem:
    """In-memory stand-in for the file collaborator."""

    def __init__(self, files=None, fail_writes=False):
        self.files = dict(files or {})
        self.fail_writes = fail_writes
        self.dirty = False
        self.writes = []

    def exists(self, path):
        return path in self.files

    def get_file(self, path):
        return self.files.get(path)

    def write_file(self, path, content):
        if self.fail_writes:
            return False
        self.files[path] = content
        self.writes.append(path)
        return True

    def set_dirty(self, dirty):
        self.dirty = dirty

    def collect_files(self, items):
        return sorted(self.files)


@pytest.fixture
def memory_fs():
    """Empty in-memory file system."""
    return MemoryFileSystem()


@pytest.fixture
def make_engine(tmp_path):
    """Build an engine over an in-memory file system."""
    def _make(files=None, fast_path=True, **fs_kwargs):
        fs = MemoryFileSystem(files, **fs_kwargs)
        config = EngineConfig(heuristic_fast_path=fast_path)
        return RepoMapEngine(str(tmp_path), config=config, file_system=fs), fs
    return _make


@pytest.fixture
def parse():
    """Parse a snippet with the grammar for an extension."""
    registry = GrammarRegistry()

    def _parse(code, extension=".js"):
        parsed = registry.parse(code, select_grammar(extension))
        assert parsed is not None, f"no parser for {extension}"
        return parsed
    return _parse


@pytest.fixture
def temp_project(tmp_path):
    """Create a temporary project directory with sample files."""
    # Create project structure
    src = tmp_path / "src"
    src.mkdir()

    # Sample JavaScript file
    (src / "auth.js").write_text('''
// Authentication helpers
function login(username, password) {
  return validate(username, password);
}

function validate(username, password) {
  return username === "admin" && password === "secret";
}

class Session {
  constructor(user) {
    this.user = user;
  }

  end() {
    this.user = null;
  }
}

module.exports = { login, validate, Session };
'''.strip() + "\n")

    # Sample Python file
    (src / "models.py").write_text('''
class User:
    def __init__(self, name):
        self.name = name

    def greet(self):
        return "Hello " + self.name


def load_user(name):
    return User(name)
'''.strip() + "\n")

    # Sample TypeScript file
    (src / "api.ts").write_text('''
interface User {
  id: number;
}

export function fetchUser(id: number): Promise<User> {
  return fetch(`/api/users/${id}`).then(r => r.json());
}
'''.strip() + "\n")

    (tmp_path / "README.md").write_text("# Sample project\n")

    # Dependencies are never mapped
    vendor = tmp_path / "node_modules" / "lib"
    vendor.mkdir(parents=True)
    (vendor / "index.js").write_text("function vendored() {}\n")

    return tmp_path


@pytest.fixture
def engine(temp_project):
    """Create a RepoMapEngine instance for the temp project."""
    return RepoMapEngine(str(temp_project))
