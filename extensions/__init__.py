"""SQLSync extensions: vendor dialects"""
