from autocrud import FileCrudController


class DocumentController(FileCrudController):
    rules = {"title": "nullable|string|max:100"}
    max_file_size = 1024
