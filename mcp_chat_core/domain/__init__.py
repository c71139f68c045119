"""领域层模型与异常。

包含：
- models: ChatMessage / SessionState / HealthReport / Enrichment 模型。
- exceptions: 业务异常类型定义。
"""
