"""Pacote webapp modular para o proxy do Alertmanager -> Feishu.

Este pacote contém:
- constants: variáveis de ambiente
- exceptions: hierarquia de erros do proxy
- config: registro de receivers com recarga atômica (YAML)
- cache: cache TTL usado para o tenant_access_token
- feishu: cliente da Open API (token do tenant e resolução de menções)
- models: payload do Alertmanager e mensagem de saída
- utils / formatters: formatação do card do bot
- services: entrega no webhook do bot
- controller: criação do Flask app e endpoints
"""
