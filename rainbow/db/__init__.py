"""Repositories, query options, table migration and a repository factory over the models."""