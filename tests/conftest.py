import asyncio

import pytest

from studioflow.adapters.demo import DemoAdapter
from studioflow.ai.adapter.base import BaseLLMAdapter
from studioflow.ai.client import LLMClient
from studioflow.ai.models.common import GenerationChunk, GenerationResult
from studioflow.core.models import Config, FileNode, FolderNode, RemoteEntry
from studioflow.core.tree import placeholder_for


class ScriptedAdapter(BaseLLMAdapter):
    """LLM adapter that replays canned chunks, text or an error."""

    def __init__(self, chunks=(), text=None, error=None, finish_reason="stop"):
        super().__init__(model="test-model", api_key="test-key-123")
        self.chunks = list(chunks)
        self.text = text if text is not None else "".join(self.chunks)
        self.error = error
        self.finish_reason = finish_reason
        self.requests = []

    async def generate(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return GenerationResult(text=self.text, finish_reason=self.finish_reason)

    async def stream(self, request, on_chunk):
        self.requests.append(request)
        for chunk in self.chunks:
            on_chunk(GenerationChunk(delta=chunk))
            await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        on_chunk(GenerationChunk(delta="", done=True))
        return GenerationResult(text="".join(self.chunks), finish_reason=self.finish_reason)


@pytest.fixture
def scripted_adapter():
    """Factory for ScriptedAdapter instances."""
    return ScriptedAdapter


@pytest.fixture
def make_client():
    """Factory: LLMClient backed by a ScriptedAdapter built from the kwargs."""
    def factory(**kwargs):
        return LLMClient(ScriptedAdapter(**kwargs), max_tokens=256, temperature=0.2)
    return factory


@pytest.fixture
def config(tmp_path):
    return Config(github_token="", store_path=tmp_path / "store")


@pytest.fixture
def demo_adapter(config):
    return DemoAdapter(config)


@pytest.fixture
def sample_entries():
    """Recursive listing of a small repository, in no particular order."""
    return [
        RemoteEntry(path="src/app.tsx", kind="blob", id="sha-app"),
        RemoteEntry(path="pkg.json", kind="blob", id="sha-pkg"),
        RemoteEntry(path="src", kind="tree", id="sha-src"),
        RemoteEntry(path="src/lib", kind="tree", id="sha-lib"),
        RemoteEntry(path="src/lib/utils.ts", kind="blob", id="sha-utils"),
    ]


@pytest.fixture
def sample_tree():
    """Hand-built snapshot: src/{app.tsx, lib/utils.ts}, README.md."""
    return [
        FolderNode(id="src", name="src", children=(
            FileNode(id="app", name="app.tsx", content=placeholder_for("src/app.tsx")),
            FolderNode(id="lib", name="lib", children=(
                FileNode(id="utils", name="utils.ts", content="export const x = 1;\n"),
            )),
        )),
        FileNode(id="readme", name="README.md", content=placeholder_for("README.md")),
    ]
