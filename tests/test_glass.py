"""Tests for the delayed transparency pass."""

import asyncio

import pyvista as pv

from glass import apply_glass, schedule_glass


class FakeScene:
    def __init__(self, actors, ready=True):
        self.actors = actors
        self.ready = ready

    def traverse(self):
        return iter(self.actors)


def mesh_actor():
    actor = pv.Actor(mapper=pv.DataSetMapper(pv.Sphere()))
    actor.prop.opacity = 1.0
    return actor


def test_apply_glass_sets_mesh_opacity():
    globe, beam = mesh_actor(), mesh_actor()
    label = object()

    count = apply_glass(FakeScene([globe, label, beam]), opacity=0.5)

    assert count == 2
    assert globe.prop.opacity == 0.5
    assert beam.prop.opacity == 0.5


def test_apply_glass_is_idempotent():
    globe = mesh_actor()
    scene = FakeScene([globe])
    apply_glass(scene, 0.5)
    apply_glass(scene, 0.5)
    assert globe.prop.opacity == 0.5


def test_apply_glass_skips_unready_scene():
    globe = mesh_actor()
    assert apply_glass(FakeScene([globe], ready=False)) == 0
    assert globe.prop.opacity == 1.0
    assert apply_glass(None) == 0


def test_schedule_glass_runs_once_after_delay():
    globe = mesh_actor()
    scene = FakeScene([globe])

    async def scenario():
        schedule_glass(scene, delay=0.01, opacity=0.5)
        assert globe.prop.opacity == 1.0
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert globe.prop.opacity == 0.5


def test_schedule_glass_can_be_cancelled():
    globe = mesh_actor()
    scene = FakeScene([globe])

    async def scenario():
        handle = schedule_glass(scene, delay=0.01, opacity=0.5)
        handle.cancel()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert globe.prop.opacity == 1.0
