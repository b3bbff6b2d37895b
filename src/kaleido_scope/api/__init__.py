"""HTTP serve 模式。"""
