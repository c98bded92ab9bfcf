"""Tests for the material models.

Tests cover:
- Lambertian attenuation and scattered direction bounds
- Metal mirror law, absorption and fuzz clamping
- Dielectric reflect probability, total internal reflection and refraction
- Diffuse light emission
- Combined material resolution
"""

import math

import pytest
import taichi as ti


class TestLambertian:
    """Tests for Lambertian scattering."""

    def test_attenuation_is_albedo(self):
        """Test that every scatter returns the albedo and never absorbs."""
        from spheretrace.core.sampler import seed_stream
        from spheretrace.materials.lambertian import scatter_lambertian, vec3

        num_samples = 500
        directions = ti.Vector.field(3, dtype=ti.f32, shape=num_samples)
        attenuations = ti.Vector.field(3, dtype=ti.f32, shape=num_samples)
        scattered = ti.field(dtype=ti.i32, shape=num_samples)

        @ti.kernel
        def test_kernel():
            albedo = vec3(0.1, 0.2, 0.5)
            normal = vec3(0.0, 1.0, 0.0)
            for i in range(num_samples):
                state = seed_stream(ti.u32(17), ti.cast(i, ti.u32))
                direction, attenuation, did_scatter, _ = scatter_lambertian(albedo, normal, state)
                directions[i] = direction
                attenuations[i] = attenuation
                scattered[i] = did_scatter

        test_kernel()
        att = attenuations.to_numpy()
        assert (abs(att - [0.1, 0.2, 0.5]) < 1e-6).all()
        assert (scattered.to_numpy() == 1).all()

        # normal + offset lies inside the unit sphere around the normal
        dirs = directions.to_numpy()
        offsets = dirs - [0.0, 1.0, 0.0]
        assert ((offsets**2).sum(axis=1) < 1.0).all()
        # All directions lean toward the normal side
        assert (dirs[:, 1] >= 0.0).all()


class TestMetal:
    """Tests for Metal scattering."""

    def test_fuzz_zero_is_mirror(self):
        """Test the mirror law with fuzz 0."""
        from spheretrace.core.sampler import seed_stream
        from spheretrace.materials.metal import scatter_metal, vec3

        result_dir = ti.Vector.field(3, dtype=ti.f32, shape=())
        result_att = ti.Vector.field(3, dtype=ti.f32, shape=())
        result_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            incident = vec3(2.0, -2.0, 2.0)
            normal = vec3(0.0, 1.0, 0.0)
            direction, attenuation, did_scatter, _ = scatter_metal(
                vec3(0.8, 0.6, 0.2), 0.0, incident, normal, seed_stream(ti.u32(1), ti.u32(0))
            )
            result_dir[None] = direction
            result_att[None] = attenuation
            result_scatter[None] = did_scatter

        test_kernel()
        d = result_dir[None]
        expected = 1.0 / math.sqrt(3.0)
        assert abs(d[0] - expected) < 1e-5
        assert abs(d[1] - expected) < 1e-5
        assert abs(d[2] - expected) < 1e-5
        a = result_att[None]
        assert abs(a[0] - 0.8) < 1e-6
        assert abs(a[1] - 0.6) < 1e-6
        assert abs(a[2] - 0.2) < 1e-6
        assert result_scatter[None] == 1

    def test_reflection_into_surface_is_absorbed(self):
        """Test that a reflection pointing below the surface is absorbed."""
        from spheretrace.core.sampler import seed_stream
        from spheretrace.materials.metal import scatter_metal, vec3

        result_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # Arriving from below the surface: the mirror image points down
            _, _, did_scatter, _ = scatter_metal(
                vec3(1.0, 1.0, 1.0),
                0.0,
                vec3(0.0, 1.0, 0.0),
                vec3(0.0, 1.0, 0.0),
                seed_stream(ti.u32(1), ti.u32(0)),
            )
            result_scatter[None] = did_scatter

        test_kernel()
        assert result_scatter[None] == 0

    def test_fuzz_spreads_reflection(self):
        """Test that larger fuzz gives a wider spread."""
        from spheretrace.core.sampler import seed_stream
        from spheretrace.materials.metal import scatter_metal, vec3

        num_samples = 200
        low_x = ti.field(dtype=ti.f32, shape=num_samples)
        high_x = ti.field(dtype=ti.f32, shape=num_samples)

        @ti.kernel
        def test_kernel():
            incident = vec3(0.0, -1.0, 0.0)
            normal = vec3(0.0, 1.0, 0.0)
            albedo = vec3(1.0, 1.0, 1.0)
            for i in range(num_samples):
                state = seed_stream(ti.u32(23), ti.cast(i, ti.u32))
                direction_low, _, _, _ = scatter_metal(albedo, 0.1, incident, normal, state)
                direction_high, _, _, _ = scatter_metal(albedo, 0.5, incident, normal, state)
                low_x[i] = direction_low.x
                high_x[i] = direction_high.x

        test_kernel()
        low = low_x.to_numpy()
        high = high_x.to_numpy()
        assert high.max() - high.min() > low.max() - low.min()
        assert abs(low).max() <= 0.1 + 1e-6

    def test_fuzz_clamped_to_one(self):
        """Test that fuzz above 1 is clamped at construction."""
        from spheretrace.materials import Metal

        assert Metal(albedo=(0.5, 0.5, 0.5), fuzz=3.0).fuzz == 1.0
        assert Metal(albedo=(0.5, 0.5, 0.5), fuzz=0.3).fuzz == 0.3
        assert Metal(albedo=(0.5, 0.5, 0.5)).fuzz == 0.0


class TestDielectric:
    """Tests for Dielectric scattering."""

    def test_reflect_probability_at_normal_incidence(self):
        """Test that entering head-on reflects with probability r0."""
        from spheretrace.materials.dielectric import reflect_probability, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect_probability(1.5, vec3(0.0, -3.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert abs(result[None] - 0.04) < 1e-5

    def test_reflect_probability_exiting_head_on(self):
        """Test that leaving head-on uses the exiting cosine (1) and gives r0."""
        from spheretrace.materials.dielectric import reflect_probability, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            # Ray travels along the stored (outward) normal: leaving the glass
            result[None] = reflect_probability(1.5, vec3(0.0, 1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert abs(result[None] - 0.04) < 1e-5

    def test_total_internal_reflection_always_reflects(self):
        """Test that TIR gives probability 1 and a mirror direction."""
        from spheretrace.core.sampler import seed_stream
        from spheretrace.materials.dielectric import (
            reflect_probability,
            scatter_dielectric,
            vec3,
        )

        num_samples = 50
        probability = ti.field(dtype=ti.f32, shape=())
        directions = ti.Vector.field(3, dtype=ti.f32, shape=num_samples)

        @ti.kernel
        def test_kernel():
            # Leaving glass at 60 degrees from the normal
            incident = vec3(ti.sqrt(3.0), 1.0, 0.0)
            normal = vec3(0.0, 1.0, 0.0)
            probability[None] = reflect_probability(1.5, incident, normal)
            for i in range(num_samples):
                state = seed_stream(ti.u32(31), ti.cast(i, ti.u32))
                direction, _, _, _ = scatter_dielectric(1.5, incident, normal, state)
                directions[i] = direction

        test_kernel()
        assert probability[None] == 1.0
        dirs = directions.to_numpy()
        assert (abs(dirs[:, 0] - math.sqrt(3.0) / 2.0) < 1e-5).all()
        assert (abs(dirs[:, 1] + 0.5) < 1e-5).all()

    def test_scatter_mixes_reflection_and_refraction(self):
        """Test that head-on rays mostly refract straight through."""
        from spheretrace.core.sampler import seed_stream
        from spheretrace.materials.dielectric import scatter_dielectric, vec3

        num_samples = 4000
        directions_y = ti.field(dtype=ti.f32, shape=num_samples)
        attenuations = ti.Vector.field(3, dtype=ti.f32, shape=num_samples)
        scattered = ti.field(dtype=ti.i32, shape=num_samples)

        @ti.kernel
        def test_kernel():
            incident = vec3(0.0, -1.0, 0.0)
            normal = vec3(0.0, 1.0, 0.0)
            for i in range(num_samples):
                state = seed_stream(ti.u32(37), ti.cast(i, ti.u32))
                direction, attenuation, did_scatter, _ = scatter_dielectric(
                    1.5, incident, normal, state
                )
                directions_y[i] = direction.y
                attenuations[i] = attenuation
                scattered[i] = did_scatter

        test_kernel()
        ys = directions_y.to_numpy()
        reflected = (ys > 0.0).mean()
        # Schlick r0 for glass is 0.04
        assert abs(reflected - 0.04) < 0.015
        assert (abs(abs(ys) - 1.0) < 1e-5).all()
        assert (attenuations.to_numpy() == 1.0).all()
        assert (scattered.to_numpy() == 1).all()


class TestDiffuseLight:
    """Tests for diffuse light emission."""

    def test_emission_is_emittance(self):
        """Test that a diffuse light emits its emittance."""
        from spheretrace.materials.diffuse_light import emit_diffuse_light, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = emit_diffuse_light(vec3(4.0, 2.0, 1.0))

        test_kernel()
        e = result[None]
        assert abs(e[0] - 4.0) < 1e-6
        assert abs(e[1] - 2.0) < 1e-6
        assert abs(e[2] - 1.0) < 1e-6


class TestCombined:
    """Tests for Combined material resolution."""

    def test_sources_resolve_nested_chains(self):
        """Test that nested Combined values resolve to concrete materials."""
        from spheretrace.materials import (
            Combined,
            DiffuseLight,
            Lambertian,
            Metal,
            emission_source,
            scattering_source,
        )

        matte = Lambertian(albedo=(0.5, 0.5, 0.5))
        mirror = Metal(albedo=(0.9, 0.9, 0.9))
        lamp = DiffuseLight(emittance=(2.0, 2.0, 2.0))
        inner = Combined(scatterer=matte, emitter=lamp)
        outer = Combined(scatterer=Combined(scatterer=mirror, emitter=matte), emitter=inner)

        assert scattering_source(inner) is matte
        assert emission_source(inner) is lamp
        assert scattering_source(outer) is mirror
        assert emission_source(outer) is lamp
        assert scattering_source(lamp) is lamp

    def test_materials_are_immutable_values(self):
        """Test that materials compare and hash by value."""
        from spheretrace.materials import Dielectric, Lambertian

        a = Lambertian(albedo=(0.1, 0.2, 0.3))
        b = Lambertian(albedo=(0.1, 0.2, 0.3))
        assert a == b
        assert hash(a) == hash(b)
        assert Dielectric(1.5) != Dielectric(1.33)
        with pytest.raises(AttributeError):
            a.albedo = (1.0, 1.0, 1.0)
