"""Business operations; every function takes the request's ``Session`` first."""
