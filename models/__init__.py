# Yannova API models
