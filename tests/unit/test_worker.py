import pytest

from app.jobs import worker


@pytest.mark.asyncio
async def test_run_worker_runs_job(monkeypatch):
    called = {"ok": False}

    async def dummy_job():
        called["ok"] = True

    monkeypatch.setitem(worker.JOB_REGISTRY, "dummy", dummy_job)

    await worker.run_worker("dummy")

    assert called["ok"] is True


@pytest.mark.asyncio
async def test_run_worker_unknown_job():
    with pytest.raises(ValueError):
        await worker.run_worker("missing")


def test_event_reminders_is_the_default_job(monkeypatch):
    monkeypatch.setattr(worker.sys, "argv", ["worker"])
    monkeypatch.delenv("WORKER_JOB", raising=False)

    assert worker._resolve_job_name() == "event_reminders"
    assert "event_reminders" in worker.JOB_REGISTRY
