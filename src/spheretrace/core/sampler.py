"""Explicit random number streams for Monte Carlo sampling.

Every sampling routine in the renderer takes a ``ti.u32`` RNG state and
returns the advanced state alongside its result, so randomness is threaded
through calls instead of being drawn from a hidden global source. The
renderer keeps one state per pixel, seeded from the render seed and the
pixel index, which makes each pixel an independent, reproducible stream
regardless of how Taichi schedules the work.

The stream generator is xorshift32; seeding mixes the seed and stream index
with Thomas Wang's integer hash.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretrace.core.sampler import next_uniform, seed_stream
    >>> # Inside a Taichi kernel:
    >>> # state = seed_stream(ti.u32(42), ti.u32(pixel_index))
    >>> # xi, state = next_uniform(state)
"""

import taichi as ti

# 2^-24: maps the top 24 bits of a state to [0, 1) exactly in f32
INV_2_24 = 1.0 / 16777216.0


@ti.func
def wang_hash(seed: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer with Thomas Wang's hash.

    Args:
        seed: The value to hash.

    Returns:
        The hashed value.
    """
    s = (seed ^ ti.u32(61)) ^ (seed >> ti.u32(16))
    s *= ti.u32(9)
    s = s ^ (s >> ti.u32(4))
    s *= ti.u32(0x27D4EB2D)
    s = s ^ (s >> ti.u32(15))
    return s


@ti.func
def xorshift32(state: ti.u32) -> ti.u32:
    """Advance a xorshift32 state by one step.

    The state must be non-zero; zero is a fixed point of the generator.
    """
    x = state
    x ^= x << ti.u32(13)
    x ^= x >> ti.u32(17)
    x ^= x << ti.u32(5)
    return x


@ti.func
def seed_stream(seed: ti.u32, stream: ti.u32) -> ti.u32:
    """Derive the initial state of an independent random stream.

    Args:
        seed: The render-wide seed.
        stream: The stream index (for example a flattened pixel index).

    Returns:
        A non-zero RNG state.
    """
    state = wang_hash(seed ^ wang_hash(stream))
    if state == ti.u32(0):
        state = ti.u32(1)
    return state


@ti.func
def next_uniform(state: ti.u32):
    """Draw a uniform float in [0, 1) from a random stream.

    Args:
        state: The current RNG state.

    Returns:
        A tuple of (value, new_state).
    """
    next_state = xorshift32(state)
    value = ti.cast(next_state >> ti.u32(8), ti.f32) * INV_2_24
    return value, next_state
