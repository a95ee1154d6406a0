"""Segwit (BIP141/BIP143) scripts, transactions and signing"""
