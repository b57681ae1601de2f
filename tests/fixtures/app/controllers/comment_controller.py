from autocrud import CrudController


class CommentController(CrudController):
    rules = {
        "post_id": ["required", "integer"],
        "body": ["required", "string"],
    }
    with_ = ("post",)
    order_by = {"id": "asc"}
