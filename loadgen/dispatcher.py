import logging
from dataclasses import dataclass
from typing import Dict

import httpx

from . import config
from .rand import RandomSource

log = logging.getLogger(__name__)

# Query parameter ranges
INIT_AMOUNT_RANGE = (500, 100000)
MONTHLY_CONTRIBUTION_RANGE = (50, 5000)
INTEREST_RATE_RANGE = (0.1, 200.0)
NUMBER_OF_YEARS_RANGE = (1, 50)


@dataclass(frozen=True)
class JobParams:
    init_amount: int
    monthly_contribution: int
    interest_rate: str
    number_of_years: int

    @classmethod
    def generate(cls, rng: RandomSource) -> "JobParams":
        return cls(
            init_amount=rng.random_int(*INIT_AMOUNT_RANGE),
            monthly_contribution=rng.random_int(*MONTHLY_CONTRIBUTION_RANGE),
            interest_rate=f"{rng.random_float(*INTEREST_RATE_RANGE):.2f}",
            number_of_years=rng.random_int(*NUMBER_OF_YEARS_RANGE),
        )

    def as_query(self) -> Dict[str, str]:
        return {
            "initAmount": str(self.init_amount),
            "monthlyContribution": str(self.monthly_contribution),
            "interestRate": self.interest_rate,
            "numberOfYears": str(self.number_of_years),
        }

    def describe(self) -> str:
        return (f"initAmount: {self.init_amount}, monthlyContribution: {self.monthly_contribution}, "
                f"interestRate: {self.interest_rate}, numberOfYears: {self.number_of_years}")


def status_line(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


class RequestDispatcher:
    """Sends one GET request per job against a fixed endpoint.

    Failures are logged with the job id and never raised; the caller only
    learns that the job finished.
    """

    def __init__(self, rng: RandomSource, url: str = config.TARGET_URL,
                 user_agent: str = config.USER_AGENT):
        self.rng = rng
        self.url = url
        self.user_agent = user_agent

    async def __call__(self, client: httpx.AsyncClient, job_id: int) -> None:
        params = JobParams.generate(self.rng)

        try:
            request = client.build_request(
                "GET", self.url,
                params=params.as_query(),
                headers={"User-Agent": self.user_agent},
            )
        except (httpx.InvalidURL, ValueError) as e:
            log.error("Error creating request %d (%s): %s", job_id, params.describe(), e)
            return

        try:
            # send() reads the body and releases the connection
            response = await client.send(request)
        except httpx.HTTPError as e:
            log.error("Error in request %d (%s): %s: %s",
                      job_id, params.describe(), type(e).__name__, e)
            return

        log.info("Request %d - %s, Status: %s", job_id, params.describe(), status_line(response))
