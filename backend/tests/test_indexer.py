"""Unit tests for the best-effort indexer."""

from __future__ import annotations

from consult_assistant.models.consultation import ConsultationRecord
from consult_assistant.services.indexer import Indexer
from consult_assistant.services.vector_store import VectorStore

from conftest import FakeVectorizer, make_record


class TestIndexBatch:
    async def test_indexes_every_record(
        self, vectorizer: FakeVectorizer, store: VectorStore
    ) -> None:
        indexer = Indexer(vectorizer, store, concurrency=2)
        report = await indexer.index_batch([make_record("c-1"), make_record("c-2")])

        assert sorted(report.indexed) == ["c-1", "c-2"]
        assert report.failed == []
        passages = {p.record_id: p for p in await store.get_all()}
        assert passages["c-1"].passage_text.startswith("Doctor: Dr. Rajesh Kumar")
        assert passages["c-1"].vector == vectorizer.vector_for(passages["c-1"].passage_text)
        assert passages["c-1"].model_tag == vectorizer.model_tag
        assert passages["c-1"].indexed_at.tzinfo is not None

    async def test_partial_failure_continues(self, store: VectorStore) -> None:
        vectorizer = FakeVectorizer(fail_on=("Dr. Broken",))
        records = [
            make_record("c-1"),
            make_record("c-2", doctor_name="Dr. Broken"),
            make_record("c-3"),
        ]
        report = await Indexer(vectorizer, store).index_batch(records)

        assert sorted(report.indexed) == ["c-1", "c-3"]
        assert [f.record_id for f in report.failed] == ["c-2"]
        assert "quota exceeded" in report.failed[0].reason
        assert sorted(p.record_id for p in await store.get_all()) == ["c-1", "c-3"]

    async def test_unexpected_error_is_reported_not_raised(
        self, vectorizer: FakeVectorizer, store: VectorStore, mocker
    ) -> None:
        real_embed = vectorizer.embed_passage

        async def _embed(text: str) -> list[float]:
            if "Dr. Flaky" in text:
                raise RuntimeError("unexpected SDK failure")
            return await real_embed(text)

        mocker.patch.object(vectorizer, "embed_passage", side_effect=_embed)
        records = [
            make_record("c-1"),
            make_record("c-2", doctor_name="Dr. Flaky"),
            make_record("c-3"),
        ]
        report = await Indexer(vectorizer, store).index_batch(records)

        assert sorted(report.indexed) == ["c-1", "c-3"]
        assert [f.record_id for f in report.failed] == ["c-2"]
        assert "unexpected SDK failure" in report.failed[0].reason
        assert sorted(p.record_id for p in await store.get_all()) == ["c-1", "c-3"]

    async def test_invalid_record_is_reported_not_raised(
        self, vectorizer: FakeVectorizer, store: VectorStore
    ) -> None:
        report = await Indexer(vectorizer, store).index_batch(
            [ConsultationRecord(id="c-1"), make_record("c-2")]
        )
        assert report.indexed == ["c-2"]
        assert report.failed[0].record_id == "c-1"
        # Never reached the embedding model
        assert len(vectorizer.calls) == 1

    async def test_reindexing_replaces_passage(
        self, vectorizer: FakeVectorizer, store: VectorStore
    ) -> None:
        indexer = Indexer(vectorizer, store)
        await indexer.index_batch([make_record("c-1", diagnosis="Viral fever")])
        await indexer.index_batch([make_record("c-1", diagnosis="Skin rash")])

        passages = await store.get_all()
        assert len(passages) == 1
        assert "Diagnosis: Skin rash" in passages[0].passage_text
        assert passages[0].vector == vectorizer.vector_for(passages[0].passage_text)

    async def test_sequential_run_keeps_input_order(
        self, vectorizer: FakeVectorizer, store: VectorStore
    ) -> None:
        records = [make_record(f"c-{i}", patient_name=f"Patient {i}") for i in range(4)]
        report = await Indexer(vectorizer, store, concurrency=1).index_batch(records)

        assert report.indexed == ["c-0", "c-1", "c-2", "c-3"]
        embedded = [text for kind, text in vectorizer.calls if kind == "passage"]
        assert [f"Patient {i}" in text for i, text in enumerate(embedded)] == [True] * 4

    async def test_empty_batch(self, vectorizer: FakeVectorizer, store: VectorStore) -> None:
        report = await Indexer(vectorizer, store).index_batch([])
        assert report.indexed == []
        assert report.failed == []
