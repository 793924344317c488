from fastapi import Request

from .election import Election


def get_election(request: Request) -> Election:
    return request.app.state.election
