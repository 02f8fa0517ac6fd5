"""Unit tests for Butcher tableau construction and the preset catalog."""

import math
import warnings

import pytest

from jax_rk.integrate import (
    ButcherTableau,
    EmbeddedWeights,
    InvalidTableau,
    PRESETS,
    UnknownPreset,
    WeightSumWarning,
    get_tableau,
    list_presets,
)


FIXED = ["euler", "midpoint", "heun", "ralston", "rk3", "heun3", "ralston3",
         "ssprk3", "rk4", "ralston4"]
EMBEDDED = ["euler-heun", "euler-midpoint", "rkf12", "bs23", "rkf45", "ck45",
            "dp45"]


class TestPresets:

    def test_catalog_names(self):
        assert set(list_presets()) == set(FIXED) | set(EMBEDDED)
        assert set(list_presets(adaptive=False)) == set(FIXED)
        assert set(list_presets(adaptive=True)) == set(EMBEDDED)

    @pytest.mark.parametrize("name", FIXED + EMBEDDED)
    def test_preset_structure(self, name):
        tab = get_tableau(name)
        s = tab.num_stages
        assert tab.name == name
        assert len(tab.c) == s and tab.c[0] == 0.0
        assert len(tab.rk_matrix) == s - 1
        for i, row in enumerate(tab.rk_matrix):
            assert len(row) == i + 1
            assert math.isclose(sum(row), tab.nodes[i], abs_tol=1e-9)
        assert math.isclose(sum(tab.high_weights), 1.0, abs_tol=1e-9)

    @pytest.mark.parametrize("name", EMBEDDED)
    def test_embedded_presets_are_adaptive(self, name):
        tab = get_tableau(name)
        assert tab.is_adaptive
        assert len(tab.low_weights) == tab.num_stages

    @pytest.mark.parametrize("name", FIXED)
    def test_fixed_presets_are_not_adaptive(self, name):
        tab = get_tableau(name)
        assert not tab.is_adaptive
        assert tab.low_weights is None

    def test_dormand_prince_rational_rows(self):
        """Row sums of rational coefficients only hold up to rounding."""
        tab = ButcherTableau.from_preset("dp45")
        assert tab.num_stages == 7
        assert tab.order == 5

    def test_unknown_preset(self):
        with pytest.raises(UnknownPreset) as excinfo:
            get_tableau("rk5")
        assert excinfo.value.name == "rk5"
        assert "rk4" in excinfo.value.available
        assert isinstance(excinfo.value, LookupError)

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            PRESETS["mine"] = get_tableau("euler")


class TestValidation:

    def test_explicit_coefficients(self):
        tab = ButcherTableau(
            order=2, num_stages=2, nodes=[0.5], rk_matrix=[[0.5]], weights=[0.0, 1.0]
        )
        assert tab == get_tableau("midpoint")
        assert tab.nodes == (0.5,)
        assert tab.rk_matrix == ((0.5,),)

    def test_row_sum_must_match_node(self):
        with pytest.raises(InvalidTableau):
            ButcherTableau(
                order=2, num_stages=2, nodes=[0.5], rk_matrix=[[0.3]], weights=[0.0, 1.0]
            )

    @pytest.mark.parametrize("num_stages", [0, -1, 1.5, "2", True])
    def test_num_stages_must_be_positive_integer(self, num_stages):
        with pytest.raises(InvalidTableau):
            ButcherTableau(
                order=1, num_stages=num_stages, nodes=[], rk_matrix=[], weights=[1.0]
            )

    def test_order_must_be_positive_integer(self):
        with pytest.raises(InvalidTableau):
            ButcherTableau(order=0, num_stages=1, nodes=[], rk_matrix=[], weights=[1.0])

    def test_nodes_length(self):
        with pytest.raises(InvalidTableau):
            ButcherTableau(
                order=2, num_stages=2, nodes=[0.5, 0.5], rk_matrix=[[0.5]], weights=[0.0, 1.0]
            )

    def test_nodes_range(self):
        with pytest.raises(InvalidTableau):
            ButcherTableau(
                order=2, num_stages=2, nodes=[1.5], rk_matrix=[[1.5]], weights=[0.0, 1.0]
            )

    def test_rk_matrix_length(self):
        with pytest.raises(InvalidTableau):
            ButcherTableau(
                order=2, num_stages=2, nodes=[0.5], rk_matrix=[], weights=[0.0, 1.0]
            )

    def test_rk_matrix_row_length(self):
        with pytest.raises(InvalidTableau):
            ButcherTableau(
                order=3,
                num_stages=3,
                nodes=[0.5, 1.0],
                rk_matrix=[[0.5], [1.0]],
                weights=[1/6, 2/3, 1/6],
            )

    def test_weights_length(self):
        with pytest.raises(InvalidTableau):
            ButcherTableau(
                order=2, num_stages=2, nodes=[0.5], rk_matrix=[[0.5]], weights=[1.0]
            )

    def test_embedded_weights_length(self):
        with pytest.raises(InvalidTableau):
            ButcherTableau(
                order=2,
                num_stages=2,
                nodes=[1.0],
                rk_matrix=[[1.0]],
                weights=EmbeddedWeights(high=[0.5, 0.5], low=[1.0]),
            )

    def test_embedded_weights_from_mapping(self):
        tab = ButcherTableau(
            order=2,
            num_stages=2,
            nodes=[1.0],
            rk_matrix=[[1.0]],
            weights={"high": [0.5, 0.5], "low": [1.0, 0.0]},
        )
        assert tab.is_adaptive
        assert tab.weights == EmbeddedWeights((0.5, 0.5), (1.0, 0.0))

    def test_embedded_weights_mapping_keys(self):
        with pytest.raises(InvalidTableau):
            ButcherTableau(
                order=2,
                num_stages=2,
                nodes=[1.0],
                rk_matrix=[[1.0]],
                weights={"high": [0.5, 0.5]},
            )

    def test_non_numeric_coefficients(self):
        with pytest.raises(InvalidTableau):
            ButcherTableau(
                order=2, num_stages=2, nodes=[None], rk_matrix=[[0.5]], weights=[0.0, 1.0]
            )

    def test_weight_sum_warns(self):
        with pytest.warns(WeightSumWarning):
            tab = ButcherTableau(
                order=2, num_stages=2, nodes=[0.5], rk_matrix=[[0.5]], weights=[0.5, 0.4]
            )
        assert tab.weights == (0.5, 0.4)

    def test_truncated_weights_within_tolerance(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", WeightSumWarning)
            ButcherTableau(
                order=4,
                num_stages=4,
                nodes=[0.5, 0.5, 1.0],
                rk_matrix=[[0.5], [0.0, 0.5], [0.0, 0.0, 1.0]],
                weights=[0.167, 0.333, 0.333, 0.167],
            )

    def test_tableau_is_immutable(self):
        tab = get_tableau("rk4")
        with pytest.raises(AttributeError):
            tab.order = 5
