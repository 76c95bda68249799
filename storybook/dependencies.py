from fastapi import Request


def get_storage(request: Request):
    return request.app.state.storage


def get_generate_book(request: Request):
    return request.app.state.generate_book


def get_create_order(request: Request):
    return request.app.state.create_order
