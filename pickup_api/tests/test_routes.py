"""
Tests for the PickupForge API routes.

Validates:
1. Coil computation, two-coil wiring and input errors (400)
2. Loaded response sweep, normalized at the reference frequency, and transformer routing
3. Transformer figures and response from a single model build
4. Analyzer ordering over HTTP
5. Core catalog listing and lookup
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from fastapi.testclient import TestClient

from pickup_api.main import app
from pickup_api.routes import transformer as transformer_route
from pickup_engine import transformer as transformer_engine
from pickup_engine.impedance import REFERENCE_FREQUENCY

client = TestClient(app)


VINTAGE_GEOMETRY = {"form": "cylindrical", "inner_radius": 3.5, "outer_radius": 7.0, "height": 11.0}
VINTAGE_WIRE = {
    "wire_diameter": 0.0635,
    "turns": 7600,
    "winding_style": "scatter",
    "packing_factor": 0.72,
    "insulation": "plain_enamel",
}

STEP_UP = {
    "enabled": True,
    "core": {
        "material": {"base": "nanocrystalline", "variant": "nc_iron"},
        "effective_area": 52.0,
        "effective_length": 62.0,
    },
    "winding": {"primary_turns": 200, "secondary_turns": 2000},
}


def vintage_coil() -> dict:
    resp = client.post("/api/coil", json={"geometry": VINTAGE_GEOMETRY, "wire": VINTAGE_WIRE})
    assert resp.status_code == 200
    return resp.json()["coil"]


class TestHealth:

    def test_health(self):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"


class TestCoil:
    """POST /api/coil"""

    def test_single_coil(self):
        resp = client.post("/api/coil", json={"geometry": VINTAGE_GEOMETRY, "wire": VINTAGE_WIRE})
        assert resp.status_code == 200
        data = resp.json()
        assert 1000 < data["coil"]["dc_resistance"] < 2000
        assert 0.1 < data["coil"]["inductance"] < 1.0
        assert data["second_coil"] is None
        assert data["combined"]["output_multiplier"] == 1.0
        assert data["coil"]["solenoid_inductance"] > 0

    def test_series_humbucker(self):
        resp = client.post("/api/coil", json={
            "geometry": VINTAGE_GEOMETRY,
            "wire": VINTAGE_WIRE,
            "second_geometry": VINTAGE_GEOMETRY,
            "wiring": "series",
        })
        assert resp.status_code == 200
        data = resp.json()
        single_l = data["coil"]["inductance"]
        assert data["second_coil"]["inductance"] == pytest.approx(single_l)
        assert data["combined"]["results"]["inductance"] == pytest.approx(2 * single_l * 1.75)
        assert data["combined"]["output_multiplier"] == 2.0
        assert data["combined"]["results"]["solenoid_inductance"] is None

    def test_numeric_coupling(self):
        resp = client.post("/api/coil", json={
            "geometry": VINTAGE_GEOMETRY,
            "wire": VINTAGE_WIRE,
            "second_geometry": VINTAGE_GEOMETRY,
            "wiring": "series",
            "coupling": 0.0,
        })
        data = resp.json()
        assert data["combined"]["results"]["inductance"] == pytest.approx(2 * data["coil"]["inductance"])

    def test_unknown_coupling_preset(self):
        resp = client.post("/api/coil", json={
            "geometry": VINTAGE_GEOMETRY,
            "wire": VINTAGE_WIRE,
            "second_geometry": VINTAGE_GEOMETRY,
            "wiring": "series",
            "coupling": "sideways",
        })
        assert resp.status_code == 400

    def test_zero_wire_diameter(self):
        wire = dict(VINTAGE_WIRE, wire_diameter=0.0)
        resp = client.post("/api/coil", json={"geometry": VINTAGE_GEOMETRY, "wire": wire})
        assert resp.status_code == 400
        assert "wire diameter" in resp.json()["detail"]

    def test_packing_factor_out_of_range(self):
        wire = dict(VINTAGE_WIRE, packing_factor=1.5)
        resp = client.post("/api/coil", json={"geometry": VINTAGE_GEOMETRY, "wire": wire})
        assert resp.status_code == 422


class TestResponse:
    """POST /api/response"""

    def test_loaded_response(self):
        coil = vintage_coil()
        resp = client.post("/api/response", json={
            "coil": coil, "freq_start": 20, "freq_end": 20000, "num_points": 50,
        })
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["frequency_response"]) == 50
        assert len(data["impedance"]) == 50
        assert data["load_results"]["loaded_resonance"] < coil["resonant_frequency"]
        assert 0.5 <= data["load_results"]["loaded_q"] <= 10
        assert data["transient"]["ringing_period_ms"] > 0

    def test_normalized_at_reference(self):
        coil = vintage_coil()
        resp = client.post("/api/response", json={
            "coil": coil, "freq_start": REFERENCE_FREQUENCY, "freq_end": 2 * REFERENCE_FREQUENCY, "num_points": 11,
        })
        first = resp.json()["frequency_response"][0]
        assert first["frequency"] == pytest.approx(REFERENCE_FREQUENCY)
        assert first["magnitude"] == pytest.approx(1.0)

    def test_through_transformer(self):
        coil = vintage_coil()
        resp = client.post("/api/response", json={
            "coil": coil, "transformer": STEP_UP, "num_points": 50,
        })
        assert resp.status_code == 200
        assert len(resp.json()["frequency_response"]) == 50

    def test_inverted_sweep(self):
        coil = vintage_coil()
        resp = client.post("/api/response", json={"coil": coil, "freq_start": 5000, "freq_end": 100})
        assert resp.status_code == 400

    def test_too_few_points(self):
        coil = vintage_coil()
        resp = client.post("/api/response", json={"coil": coil, "num_points": 5})
        assert resp.status_code == 422


class TestTransformer:
    """POST /api/transformer"""

    def test_step_up(self):
        resp = client.post("/api/transformer", json={"transformer": STEP_UP, "num_points": 40})
        assert resp.status_code == 200
        data = resp.json()
        assert data["results"]["turns_ratio"] == pytest.approx(10.0)
        assert 0 <= data["results"]["saturation_margin"] <= 1
        assert data["results"]["core_loss_estimate"] in ("low", "medium", "high")
        assert len(data["response"]) == 40

    def test_model_built_once(self, monkeypatch):
        calls = []
        build = transformer_engine.build_transformer_model

        def counting_build(*args, **kwargs):
            calls.append(args)
            return build(*args, **kwargs)

        monkeypatch.setattr(transformer_engine, "build_transformer_model", counting_build)
        monkeypatch.setattr(transformer_route, "build_transformer_model", counting_build)
        resp = client.post("/api/transformer", json={"transformer": STEP_UP, "num_points": 20})
        assert resp.status_code == 200
        assert len(calls) == 1

    def test_mismatched_core_variant(self):
        bad = dict(STEP_UP, core=dict(STEP_UP["core"], material={"base": "ferrite", "variant": "nc_iron"}))
        resp = client.post("/api/transformer", json={"transformer": bad})
        assert resp.status_code == 422


class TestAnalyze:
    """POST /api/analyze"""

    def test_overfull_bobbin_first(self):
        resp = client.post("/api/analyze", json={"geometry": VINTAGE_GEOMETRY, "wire": VINTAGE_WIRE})
        assert resp.status_code == 200
        messages = resp.json()["messages"]
        assert messages[0]["level"] == "danger"
        assert messages[0]["title"] == "Bobbin Overflow"

    def test_with_load(self):
        resp = client.post("/api/analyze", json={
            "geometry": VINTAGE_GEOMETRY, "wire": VINTAGE_WIRE, "load": {"cable_length": 20},
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["load_results"]["total_cable_capacitance"] == pytest.approx(2000e-12)
        assert "High Cable Capacitance" in [m["title"] for m in data["messages"]]

    def test_severity_order(self):
        rank = {"danger": 0, "warning": 1, "info": 2, "success": 3}
        resp = client.post("/api/analyze", json={
            "geometry": VINTAGE_GEOMETRY, "wire": VINTAGE_WIRE, "load": {"cable_length": 20},
        })
        levels = [rank[m["level"]] for m in resp.json()["messages"]]
        assert levels == sorted(levels)


class TestCores:
    """GET /api/cores"""

    def test_list(self):
        resp = client.get("/api/cores")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == len(data["cores"]) == 9

    def test_filter(self):
        resp = client.get("/api/cores", params={"material": "ferrite"})
        assert resp.json()["total"] == 3

    def test_get(self):
        resp = client.get("/api/cores/nano_toroid_medium")
        assert resp.status_code == 200
        assert resp.json()["effective_area"] == 52.0

    def test_missing(self):
        assert client.get("/api/cores/unobtainium").status_code == 404


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
