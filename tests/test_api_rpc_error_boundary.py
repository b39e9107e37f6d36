from boxcar.api.rpc.error_boundary import fault_for_exception, fault_struct, rpc_fault_result, unhandled_exception_result
from boxcar.protocol.models import Response
from boxcar.utils.exceptions import FaultCode, MethodError, ParamsError


def test_rpc_fault_result_logs_and_maps():
    calls = []
    res = rpc_fault_result(
        method="calc.add",
        exc=ParamsError("Argument count mismatch invoking add"),
        log_info=lambda fmt, m, code, text: calls.append((fmt, m, code)),
    )
    assert res.is_fault
    assert res.fault_code == FaultCode.SERVER_ERROR_PARAMS
    assert res.fault_string == "Server Error, invalid method parameters: Argument count mismatch invoking add"
    assert calls and calls[0][1] == "calc.add"


def test_unhandled_exception_result_logs_and_maps():
    calls = []
    res = unhandled_exception_result(
        method="abc",
        exc=RuntimeError("boom"),
        log_exception=lambda fmt, m, category, exc: calls.append((fmt, m, category)),
    )
    assert res.fault_code == FaultCode.APPLICATION_ERROR
    assert res.fault_string == "Application Error: boom"
    assert calls and calls[0][1] == "abc"
    assert calls[0][2] == "application"


def test_fault_for_exception_picks_mapping():
    infos, errors = [], []
    res = fault_for_exception(
        method="ghost.ping",
        exc=MethodError("Object ghost not found"),
        log_info=lambda *a: infos.append(a),
        log_exception=lambda *a: errors.append(a),
    )
    assert res.fault_code == FaultCode.SERVER_ERROR_METHOD
    assert infos and not errors

    res = fault_for_exception(
        method="x",
        exc=ConnectionError("reset"),
        log_info=lambda *a: infos.append(a),
        log_exception=lambda *a: errors.append(a),
    )
    assert res.fault_code == FaultCode.APPLICATION_ERROR
    assert errors[0][2] == "transport"


def test_fault_struct_has_exactly_two_members():
    assert fault_struct(Response.fault(-1, "x")) == {"faultCode": -1, "faultString": "x"}
