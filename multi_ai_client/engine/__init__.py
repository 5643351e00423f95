"""并发分发与流式解析。"""
