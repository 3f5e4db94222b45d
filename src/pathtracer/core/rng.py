"""Counter-based random number streams for Taichi kernels.

Taichi's built-in ``ti.random`` draws from a per-thread generator whose
sequence depends on how the runtime schedules work onto threads, so two
renders of the same scene can differ. Instead every pixel derives its own
stream from ``(seed, pixel_index)`` and threads the 32-bit state through each
call explicitly:

    >>> state = make_rng_state(seed, pixel_index)
    >>> state, x = random_float(state)
    >>> state, y = random_float(state)

The stream is seeded with Thomas Wang's integer hash and advanced with
Marsaglia's xorshift32 step.
"""

import taichi as ti

# 2^-24: maps the top 24 bits of a state onto [0, 1)
_INV_2_24 = 1.0 / 16777216.0


@ti.func
def wang_hash(key: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer (Thomas Wang, 2007).

    Args:
        key: The value to hash.

    Returns:
        The hashed value. Nearby keys produce unrelated outputs.
    """
    h = key
    h = (h ^ ti.u32(61)) ^ (h >> ti.u32(16))
    h = h * ti.u32(9)
    h = h ^ (h >> ti.u32(4))
    h = h * ti.u32(668265261)
    h = h ^ (h >> ti.u32(15))
    return h


@ti.func
def make_rng_state(seed: ti.i32, stream: ti.i32) -> ti.u32:
    """Derive the initial state of an independent random stream.

    Args:
        seed: The render seed.
        stream: Stream identifier, e.g. the linear pixel index.

    Returns:
        A non-zero xorshift32 state.
    """
    state = wang_hash(ti.cast(seed, ti.u32) ^ wang_hash(ti.cast(stream, ti.u32)))
    # zero is a fixed point of xorshift
    if state == ti.u32(0):
        state = ti.u32(1)
    return state


@ti.func
def next_uint(state: ti.u32) -> ti.u32:
    """Advance a xorshift32 state by one step."""
    x = state
    x ^= x << ti.u32(13)
    x ^= x >> ti.u32(17)
    x ^= x << ti.u32(5)
    return x


@ti.func
def random_float(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: The current stream state.

    Returns:
        A tuple (new_state, value).
    """
    new_state = next_uint(state)
    value = ti.cast(new_state >> ti.u32(8), ti.f32) * _INV_2_24
    return new_state, value


@ti.func
def random_range(state: ti.u32, low: ti.f32, high: ti.f32):
    """Draw a uniform float in [low, high).

    Returns:
        A tuple (new_state, value).
    """
    new_state, u = random_float(state)
    return new_state, low + (high - low) * u
