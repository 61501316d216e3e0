"""Server-side dispatch: no fragments, routes run on explicit navigate()."""

from __future__ import annotations

import logging

from genro_navroutes import Router

logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

RESULTS: dict[str, str] = {}


def load_job(request, chain, next):
    if not request.params["id"].isdigit():
        print(f"rejecting job id {request.params['id']!r}")
        return
    next()


def run_job(request, chain, next):
    RESULTS[request.params["id"]] = request.params["action"] or "status"
    next()


def audit(request, chain, next):
    # Enqueued after run_job, which hands over with next() once the result is stored
    print(f"audit: {chain.value} -> {RESULTS.get(request.params['id'])}")


def schedule_audit(request, chain, next):
    chain.enqueue(audit)
    next()


if __name__ == "__main__":
    router = Router.listen(
        {"/jobs/:id/:action?": [schedule_audit, load_job, run_job]},
        env="server",
    ).plug("logging")

    for path in ("/jobs/1", "/jobs/2/restart", "/jobs/x/stop"):
        router.navigate(path)

    print(RESULTS)
