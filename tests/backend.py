from typing import Callable, List

import httpx

BACKEND_URL = "http://backend.test"

# Electronics -> Laptops -> Gaming; Electronics -> Phones; Clothing
CATEGORY_TREE = [
    {
        "categoryId": 1,
        "categoryName": "Electronics",
        "parentId": 0,
        "children": [
            {
                "categoryId": 2,
                "categoryName": "Laptops",
                "parentId": 1,
                "children": [
                    {"categoryId": 4, "categoryName": "Gaming", "parentId": 2, "children": []},
                ],
            },
            {"categoryId": 3, "categoryName": "Phones", "parentId": 1},
        ],
    },
    {"categoryId": 5, "categoryName": "Clothing", "parentId": 0, "children": []},
]


def make_backend(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """HTTP-клиент, у которого вместо бэкенда функция handler."""
    return httpx.AsyncClient(base_url=BACKEND_URL, transport=httpx.MockTransport(handler))


class RecordingBackend:
    """Фейковый бэкенд: отвечает заготовленным ответом и запоминает запросы."""

    def __init__(self, response: httpx.Response):
        self.response = response
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response
