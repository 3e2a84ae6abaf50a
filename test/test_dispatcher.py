import logging

import httpx
import pytest

from loadgen.dispatcher import JobParams, RequestDispatcher, status_line
from loadgen.rand import RandomSource

URL = "http://calc.local/calculated"


def make_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), timeout=httpx.Timeout(30.0))


def error_records(caplog):
    return [r for r in caplog.records if r.name == "loadgen.dispatcher" and r.levelno == logging.ERROR]


def test_job_params_ranges():
    rng = RandomSource(seed=9)
    for _ in range(500):
        p = JobParams.generate(rng)
        assert 500 <= p.init_amount <= 100000
        assert 50 <= p.monthly_contribution <= 5000
        assert 1 <= p.number_of_years <= 50
        whole, frac = p.interest_rate.split(".")
        assert len(frac) == 2
        assert 0.1 <= float(p.interest_rate) <= 200.0


def test_job_params_query():
    p = JobParams(init_amount=1000, monthly_contribution=60, interest_rate="3.50", number_of_years=10)
    assert p.as_query() == {
        "initAmount": "1000",
        "monthlyContribution": "60",
        "interestRate": "3.50",
        "numberOfYears": "10",
    }


def test_status_line():
    assert status_line(httpx.Response(200)) == "200 OK"
    assert status_line(httpx.Response(503)) == "503 Service Unavailable"


async def test_success_logs_parameters_and_status(caplog):
    caplog.set_level(logging.INFO)
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, text="ok")

    dispatcher = RequestDispatcher(RandomSource(seed=1), url=URL, user_agent="test-agent")
    async with make_client(handler) as client:
        await dispatcher(client, 7)

    assert len(seen) == 1
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/calculated"
    assert request.headers["User-Agent"] == "test-agent"
    params = request.url.params
    assert set(params.keys()) == {"initAmount", "monthlyContribution", "interestRate", "numberOfYears"}
    assert 500 <= int(params["initAmount"]) <= 100000

    messages = [r.getMessage() for r in caplog.records if r.name == "loadgen.dispatcher"]
    assert len(messages) == 1
    assert messages[0].startswith("Request 7 - initAmount: " + params["initAmount"])
    assert "interestRate: " + params["interestRate"] in messages[0]
    assert messages[0].endswith("Status: 200 OK")


async def test_non_2xx_is_not_an_error(caplog):
    caplog.set_level(logging.INFO)
    dispatcher = RequestDispatcher(RandomSource(seed=2), url=URL)
    async with make_client(lambda request: httpx.Response(500)) as client:
        await dispatcher(client, 0)

    assert error_records(caplog) == []
    assert "Status: 500 Internal Server Error" in caplog.text


@pytest.mark.parametrize("exc", [httpx.ConnectError, httpx.ReadTimeout])
async def test_transport_error_is_logged_not_raised(caplog, exc):
    caplog.set_level(logging.INFO)

    def handler(request):
        raise exc("boom", request=request)

    dispatcher = RequestDispatcher(RandomSource(seed=3), url=URL)
    async with make_client(handler) as client:
        await dispatcher(client, 3)

    records = error_records(caplog)
    assert len(records) == 1
    message = records[0].getMessage()
    assert message.startswith("Error in request 3 (initAmount: ")
    assert exc.__name__ in message


async def test_request_construction_error(caplog):
    caplog.set_level(logging.INFO)
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200)

    dispatcher = RequestDispatcher(RandomSource(seed=4), url="http://\x00bad")
    async with make_client(handler) as client:
        await dispatcher(client, 12)

    assert calls == []
    records = error_records(caplog)
    assert len(records) == 1
    assert records[0].getMessage().startswith("Error creating request 12")
