from tests.fixtures.app.controllers.base import ApiController


class PostController(ApiController):
    rules = {
        "title": "required|string|max:255",
        "body": "nullable|string",
        "status": "nullable|string|in:draft,published",
    }
