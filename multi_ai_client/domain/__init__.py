"""领域层模型。

包含：
- models: Message / APIType / APISettings / ModelDefinition / DeltaChunk。
- chat: 对话历史模型 Chat。
- exceptions: 业务异常类型定义。
"""
