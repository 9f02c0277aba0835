"""TaskFlow Gateway -- FastAPI 传输层"""
