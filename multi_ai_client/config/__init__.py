"""配置加载（.env / config.yaml / 环境变量）。"""
