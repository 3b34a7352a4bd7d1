"""
Service layer
Services raise PZNewsException subclasses; routers never see store errors.
"""
