"""fintola 核心模块"""
