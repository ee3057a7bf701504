"""One-shot pass that turns the globe's meshes translucent."""

import asyncio
import logging

import pyvista as pv

from settings import GLASS_DELAY, GLASS_OPACITY

logger = logging.getLogger(__name__)


def apply_glass(scene, opacity: float = GLASS_OPACITY) -> int:
    """
    Set every mesh actor in the scene to the given opacity.

    Returns the number of actors touched (0 if the scene is not ready).
    """
    if scene is None or not scene.ready:
        return 0

    count = 0
    for actor in scene.traverse():
        if isinstance(actor, pv.Actor):
            actor.prop.opacity = opacity
            count += 1

    logger.debug("glass pass: %d mesh actors at opacity %.2f", count, opacity)
    return count


def schedule_glass(scene, delay: float = GLASS_DELAY, opacity: float = GLASS_OPACITY,
                   loop=None) -> asyncio.TimerHandle:
    """Run apply_glass once, after the globe has had time to build."""
    loop = loop or asyncio.get_running_loop()
    return loop.call_later(delay, apply_glass, scene, opacity)
