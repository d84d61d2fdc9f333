"""Payment coordination: charges against the payment gateway and payment confirmations."""
