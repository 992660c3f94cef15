import json
import math

import pytest

from kb_ke_util.errors import SerializationError
from kb_ke_util.types import (CalcOnthologyDistOutput, CalcOnthologyDistParams, EnrichOnthologyParams,
                              FclusterParams, NewickOutput, PdistOutput, PdistParams, RpcContext)


def test_params_survive_a_json_loopback_with_open_map():
    params = PdistParams(
        dist_matrix={"row_ids": ["g1", "g2"], "col_ids": ["c1"], "values": [[0.1], [0.3]]},
        metric="euclidean",
        future_flag=True,
        tuning={"a": [1, 2]},
    )
    assert params.extra == {"future_flag": True, "tuning": {"a": [1, 2]}}

    wire = json.loads(json.dumps(params.to_rpc_dict()))
    back = PdistParams.from_rpc_dict(wire)

    assert back == params
    assert back.extra == params.extra


def test_unset_fields_are_left_off_the_wire():
    assert PdistParams(metric="cosine").to_rpc_dict() == {"metric": "cosine"}
    assert FclusterParams().to_rpc_dict() == {}


def test_unknown_output_fields_are_kept():
    out = PdistOutput.from_rpc_dict({"dist_matrix": {"g1-g2": "0.2"}, "labels": ["g1", "g2"], "elapsed": 0.01})
    assert out.dist_matrix == {"g1-g2": "0.2"}
    assert out.labels == ["g1", "g2"]
    assert out.extra == {"elapsed": 0.01}
    assert out.to_rpc_dict()["elapsed"] == 0.01


def test_null_open_map_entries_survive_encoding():
    params = CalcOnthologyDistParams(onthology_set={"g1": ["GO:1"]}, note=None)
    wire = params.to_rpc_dict()
    assert wire == {"onthology_set": {"g1": ["GO:1"]}, "note": None}
    assert CalcOnthologyDistParams.from_rpc_dict(json.loads(json.dumps(wire))) == params

    out = NewickOutput.from_rpc_dict({"newick": "(a);", "server_flag": None})
    assert out.extra == {"server_flag": None}
    assert out.to_rpc_dict() == {"newick": "(a);", "server_flag": None}


def test_data_matrix_key_travels_in_the_open_map():
    params = PdistParams(data_matrix={"row_ids": ["g1"]}, metric="euclidean")
    assert params.dist_matrix is None
    assert params.to_rpc_dict() == {"data_matrix": {"row_ids": ["g1"]}, "metric": "euclidean"}


def test_open_map_is_live():
    params = PdistParams(metric="cosine")
    params.extra["added_later"] = "yes"
    assert params.to_rpc_dict() == {"metric": "cosine", "added_later": "yes"}


def test_coerce_accepts_mapping_or_instance():
    p = PdistParams(metric="hamming")
    assert PdistParams.coerce(p) is p
    assert PdistParams.coerce({"metric": "hamming"}) == p


def test_boolean_like_propagation_travels_as_int():
    p = EnrichOnthologyParams(sample_set=["g1"], entity_term_set={"g1": ["GO:0005737"]}, propagation=True)
    assert p.to_rpc_dict()["propagation"] == 1


def test_infinite_distance_decodes():
    out = CalcOnthologyDistOutput.from_rpc_dict(json.loads('{"onthology_dist_set": {"g1": Infinity, "g2": 3}}'))
    assert math.isinf(out.onthology_dist_set["g1"])
    assert out.onthology_dist_set["g2"] == 3.0


def test_non_object_is_a_serialization_error():
    with pytest.raises(SerializationError) as ei:
        PdistOutput.from_rpc_dict(["not", "an", "object"], method="kb_ke_util.run_pdist")
    assert ei.value.method == "kb_ke_util.run_pdist"


def test_wrong_shape_is_a_serialization_error():
    with pytest.raises(SerializationError):
        PdistOutput.from_rpc_dict({"labels": "g1"})


def test_rpc_context_keeps_extra_keys():
    ctx = RpcContext(run_id="r-1", provenance=[{"service": "x"}])
    assert ctx.to_rpc_dict() == {"run_id": "r-1", "provenance": [{"service": "x"}]}
