"""Float controller tracing."""

import asyncio

from flowagents.toolkit.float_controller import (
    FloatContext,
    FloatController,
    float_event,
    get_float_controller,
)


def test_disabled_controller_records_nothing():
    controller = get_float_controller(enabled=False)

    assert float_event("run.started") is None
    assert controller.count_floats() == 0


def test_pattern_filter_and_report():
    with FloatContext() as fc:
        float_event("action.completed", action="a")
        float_event("action.failed", action="b")
        float_event("run.completed", steps=2)

        assert fc.count_floats("action.*") == 2
        assert [f["action"] for f in fc.get_floats("action.*")] == ["a", "b"]
        assert fc.get_report()["float_counts"] == {
            "action.completed": 1,
            "action.failed": 1,
            "run.completed": 1,
        }

    assert not FloatController.get_instance().enabled


def test_max_events_drops_oldest():
    with FloatContext() as fc:
        fc.max_events = 2
        for step in range(3):
            float_event("event.dispatched", step=step)

        assert [f["step"] for f in fc.get_floats()] == [1, 2]
        assert fc.count_floats("event.dispatched") == 2


async def test_trace_ids_are_per_task():
    async def traced(trace_id):
        token = FloatController.set_trace_id(trace_id)
        try:
            await asyncio.sleep(0)
            float_event("step")
            await asyncio.sleep(0)
            float_event("step")
        finally:
            FloatController.reset_trace_id(token)

    with FloatContext() as fc:
        await asyncio.gather(traced("run-a"), traced("run-b"))

        assert len(fc.get_floats("step", trace_id="run-a")) == 2
        assert len(fc.get_floats("step", trace_id="run-b")) == 2
        assert fc.get_floats("step", trace_id=None)[0].trace_id in {"run-a", "run-b"}
